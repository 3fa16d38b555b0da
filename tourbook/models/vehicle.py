"""Vehicle model"""
from sqlalchemy import Column, String, Integer, ForeignKey, Numeric
from sqlalchemy.orm import relationship

from tourbook.extensions import db
from tourbook.utils.helpers import to_float


class Vehicle(db.Model):
    __tablename__ = "vehicles"

    vehicle_id = Column(Integer, primary_key=True, autoincrement=True)
    driver_id = Column(Integer, ForeignKey("drivers.driver_id", ondelete="SET NULL"), nullable=True)
    make = Column(String(100), nullable=True)
    model = Column(String(100), nullable=True)
    year = Column(Integer, nullable=True)
    license_plate = Column(String(50), nullable=True)
    capacity = Column(Integer, nullable=True)
    daily_rate = Column(Numeric(10, 2), nullable=True)
    # 'available' (any case) means bookable
    status = Column(String(50), nullable=False, default="available")
    image_url = Column(String(500), nullable=True)

    driver = relationship("Driver")

    @property
    def is_available(self):
        return (self.status or '').lower() == 'available'

    def to_dict(self):
        return {
            "vehicle_id": self.vehicle_id,
            "driver_id": self.driver_id,
            "make": self.make,
            "model": self.model,
            "year": self.year,
            "license_plate": self.license_plate,
            "capacity": self.capacity,
            "daily_rate": to_float(self.daily_rate),
            "status": self.status,
            "image_url": self.image_url,
        }
