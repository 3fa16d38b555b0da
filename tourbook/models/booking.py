"""
Bookings and their (single) payment
"""
from sqlalchemy import (
    Column, String, Integer, Text, Date, DateTime, ForeignKey, Numeric, CheckConstraint
)
from sqlalchemy.orm import relationship

from tourbook.extensions import db
from tourbook.models.base import utcnow, iso
from tourbook.utils.helpers import to_float

BOOKING_STATUSES = ('pending', 'confirmed', 'in-progress', 'completed', 'cancelled')
# A booking in one of these holds its driver and guide for its date range
BLOCKING_STATUSES = ('pending', 'confirmed', 'in-progress')


class Booking(db.Model):
    __tablename__ = "bookings"

    booking_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    tour_id = Column(Integer, ForeignKey("tours.tour_id", ondelete="SET NULL"), nullable=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.vehicle_id", ondelete="SET NULL"), nullable=True)
    driver_id = Column(Integer, ForeignKey("drivers.driver_id", ondelete="SET NULL"), nullable=True, index=True)
    tour_guide_id = Column(Integer, ForeignKey("tourguides.tour_guide_id", ondelete="SET NULL"), nullable=True, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    number_of_people = Column(Integer, nullable=False, default=1)
    special_requests = Column(Text, nullable=True)
    booking_date = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("start_date < end_date", name="ck_bookings_date_range"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'in-progress', 'completed', 'cancelled')",
            name="ck_bookings_status",
        ),
    )

    user = relationship("User")
    tour = relationship("Tour")
    vehicle = relationship("Vehicle")
    driver = relationship("Driver")
    tourguide = relationship("TourGuide")
    payment = relationship("Payment", uselist=False, back_populates="booking")

    def __repr__(self):
        return f'<Booking {self.booking_id} ({self.status})>'

    def participant_role(self, user_id):
        """Which current participant slot ``user_id`` fills, or None"""
        if self.user_id == user_id:
            return 'customer'
        if self.tour_guide_id is not None and self.tour_guide_id == user_id:
            return 'tourguide'
        if self.driver_id is not None and self.driver_id == user_id:
            return 'driver'
        return None

    def to_dict(self):
        return {
            "booking_id": self.booking_id,
            "user_id": self.user_id,
            "tour_id": self.tour_id,
            "vehicle_id": self.vehicle_id,
            "driver_id": self.driver_id,
            "tour_guide_id": self.tour_guide_id,
            "start_date": iso(self.start_date),
            "end_date": iso(self.end_date),
            "total_price": to_float(self.total_price),
            "status": self.status,
            "number_of_people": self.number_of_people,
            "special_requests": self.special_requests,
            "booking_date": iso(self.booking_date),
        }


class Payment(db.Model):
    __tablename__ = "payments"

    payment_id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(Integer, ForeignKey("bookings.booking_id", ondelete="CASCADE"), nullable=False, unique=True)
    amount = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(String(50), nullable=False)
    transaction_id = Column(String(100), nullable=True)
    status = Column(String(20), nullable=False, default="pending")  # pending, completed, refunded
    refund_request = Column(String(30), nullable=True)  # NULL, REFUND_REQUESTED, APPROVED
    refund_reason = Column(Text, nullable=True)
    payment_date = Column(DateTime, default=utcnow)

    booking = relationship("Booking", back_populates="payment")

    def to_dict(self):
        return {
            "payment_id": self.payment_id,
            "booking_id": self.booking_id,
            "amount": to_float(self.amount),
            "payment_method": self.payment_method,
            "transaction_id": self.transaction_id,
            "status": self.status,
            "refund_request": self.refund_request,
            "refund_reason": self.refund_reason,
            "payment_date": iso(self.payment_date),
        }
