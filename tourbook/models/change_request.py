"""ChangeRequest model"""
from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from tourbook.extensions import db
from tourbook.models.base import utcnow, iso

REQUEST_TYPES = ('tour_guide', 'driver', 'both')
REQUEST_STATUSES = ('pending', 'approved', 'rejected', 'completed')


class ChangeRequest(db.Model):
    """
    A request to replace a booking's guide and/or driver.

    Current ids are snapshotted at creation so the booking's history
    survives the reassignment; approval ends in 'completed'.
    """
    __tablename__ = "change_requests"

    request_id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(Integer, ForeignKey("bookings.booking_id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    request_type = Column(String(20), nullable=False)
    current_tour_guide_id = Column(Integer, nullable=True)
    current_driver_id = Column(Integer, nullable=True)
    new_tour_guide_id = Column(Integer, nullable=True)
    new_driver_id = Column(Integer, nullable=True)
    reason = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    created_at = Column(DateTime, default=utcnow)
    processed_at = Column(DateTime, nullable=True)
    processed_by = Column(Integer, ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True)

    __table_args__ = (
        CheckConstraint("request_type IN ('tour_guide', 'driver', 'both')", name="ck_change_request_type"),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'completed')",
            name="ck_change_request_status",
        ),
    )

    booking = relationship("Booking")
    user = relationship("User", foreign_keys=[user_id])

    @property
    def wants_guide(self):
        return self.request_type in ('tour_guide', 'both')

    @property
    def wants_driver(self):
        return self.request_type in ('driver', 'both')

    def to_dict(self):
        return {
            "request_id": self.request_id,
            "booking_id": self.booking_id,
            "user_id": self.user_id,
            "request_type": self.request_type,
            "current_tour_guide_id": self.current_tour_guide_id,
            "current_driver_id": self.current_driver_id,
            "new_tour_guide_id": self.new_tour_guide_id,
            "new_driver_id": self.new_driver_id,
            "reason": self.reason,
            "status": self.status,
            "created_at": iso(self.created_at),
            "processed_at": iso(self.processed_at),
            "processed_by": self.processed_by,
        }
