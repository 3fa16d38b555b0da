"""
Users and their role records.

``users.role`` is the tag; each role owns one subsidiary row keyed by the
user id. Tour guides and drivers also own an ``employees`` row.
"""
from sqlalchemy import (
    Column, String, Float, Integer, Text, Date, DateTime, ForeignKey, CheckConstraint
)
from sqlalchemy.orm import relationship

from tourbook.extensions import db
from tourbook.models.base import utcnow, iso

ROLES = ('customer', 'admin', 'employee', 'tourguide', 'driver')
STAFF_ROLES = ('admin', 'employee', 'tourguide', 'driver')


class User(db.Model):
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    phone_number = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    role = Column(String(20), nullable=False, default="customer")
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        CheckConstraint(
            "role IN ({})".format(', '.join("'{}'".format(r) for r in ROLES)),
            name="ck_users_role",
        ),
    )

    customer = relationship("Customer", uselist=False, back_populates="user")
    employee = relationship("Employee", uselist=False, back_populates="user")
    tourguide = relationship("TourGuide", uselist=False, back_populates="user")
    driver = relationship("Driver", uselist=False, back_populates="user")
    admin = relationship("Admin", uselist=False, back_populates="user")

    def __repr__(self):
        return f'<User {self.username} ({self.role})>'

    @property
    def full_name(self):
        return " ".join(p for p in (self.first_name, self.last_name) if p)

    @property
    def role_detail(self):
        """The subsidiary record owned by this user's role, if any"""
        return getattr(self, self.role, None)

    def to_dict(self):
        return {
            "user_id": self.user_id,
            "username": self.username,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "phone_number": self.phone_number,
            "address": self.address,
            "role": self.role,
            "created_at": iso(self.created_at),
        }


class Customer(db.Model):
    __tablename__ = "customers"

    customer_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True)
    date_of_birth = Column(Date, nullable=True)

    user = relationship("User", back_populates="customer")


class Employee(db.Model):
    __tablename__ = "employees"

    employee_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True)
    position = Column(String(100), nullable=False, default="Employee")
    department = Column(String(100), nullable=False, default="General")
    hire_date = Column(Date, nullable=True)

    user = relationship("User", back_populates="employee")

    def to_dict(self):
        return {
            "employee_id": self.employee_id,
            "position": self.position,
            "department": self.department,
        }


class TourGuide(db.Model):
    __tablename__ = "tourguides"

    tour_guide_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True)
    license_number = Column(String(100), nullable=False)
    experience_years = Column(Integer, default=0)
    specialization = Column(String(255), nullable=True)
    rating = Column(Float, default=0.0)
    total_ratings = Column(Integer, default=0)

    user = relationship("User", back_populates="tourguide")

    def to_dict(self):
        return {
            "tour_guide_id": self.tour_guide_id,
            "license_number": self.license_number,
            "experience_years": self.experience_years,
            "specialization": self.specialization,
            "rating": self.rating or 0.0,
            "total_ratings": self.total_ratings or 0,
        }


class Driver(db.Model):
    __tablename__ = "drivers"

    driver_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True)
    license_number = Column(String(100), nullable=False)
    vehicle_type = Column(String(100), nullable=True)
    # Base64 data URL, bounded by MAX_DRIVER_PICTURE_BYTES at registration
    picture = Column(Text, nullable=True)
    rating = Column(Float, default=0.0)
    total_ratings = Column(Integer, default=0)

    user = relationship("User", back_populates="driver")

    def to_dict(self, include_picture=False):
        data = {
            "driver_id": self.driver_id,
            "license_number": self.license_number,
            "vehicle_type": self.vehicle_type,
            "rating": self.rating or 0.0,
            "total_ratings": self.total_ratings or 0,
        }
        if include_picture:
            data["picture"] = self.picture
        return data


class Admin(db.Model):
    __tablename__ = "admins"

    admin_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True)
    admin_level = Column(Integer, nullable=False, default=1)

    user = relationship("User", back_populates="admin")
