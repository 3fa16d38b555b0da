"""
Per-booking itinerary copies and customer itinerary requests
"""
from sqlalchemy import (
    Column, String, Boolean, Integer, Text, DateTime, ForeignKey, JSON, UniqueConstraint
)
from sqlalchemy.orm import relationship

from tourbook.extensions import db
from tourbook.models.base import utcnow, iso

EDITABLE_DAY_FIELDS = ('title', 'description', 'activities', 'accommodation', 'meals')
ITINERARY_REQUEST_TYPES = ('modification', 'addition', 'removal')


class CustomItineraryDay(db.Model):
    """One day of a booking's own copy of its tour itinerary"""
    __tablename__ = "custom_itinerary"

    custom_itinerary_id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(Integer, ForeignKey("bookings.booking_id", ondelete="CASCADE"), nullable=False, index=True)
    day_number = Column(Integer, nullable=False)
    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    activities = Column(JSON, nullable=True)
    accommodation = Column(String(255), nullable=True)
    meals = Column(String(255), nullable=True)
    is_modified = Column(Boolean, nullable=False, default=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("booking_id", "day_number", name="uq_custom_itinerary_day"),
    )

    def to_dict(self):
        return {
            "custom_itinerary_id": self.custom_itinerary_id,
            "booking_id": self.booking_id,
            "day_number": self.day_number,
            "title": self.title,
            "description": self.description,
            "activities": self.activities or [],
            "accommodation": self.accommodation,
            "meals": self.meals,
            "is_modified": bool(self.is_modified),
            "updated_at": iso(self.updated_at),
        }


class ItineraryRequest(db.Model):
    __tablename__ = "itinerary_requests"

    request_id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(Integer, ForeignKey("bookings.booking_id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    request_type = Column(String(20), nullable=False)
    requested_changes = Column(Text, nullable=False)
    day_number = Column(Integer, nullable=True)
    reason = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="pending")  # pending, approved, rejected
    created_at = Column(DateTime, default=utcnow)
    processed_at = Column(DateTime, nullable=True)
    processed_by = Column(Integer, ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True)

    user = relationship("User", foreign_keys=[user_id])

    def to_dict(self):
        return {
            "request_id": self.request_id,
            "booking_id": self.booking_id,
            "user_id": self.user_id,
            "request_type": self.request_type,
            "requested_changes": self.requested_changes,
            "day_number": self.day_number,
            "reason": self.reason,
            "status": self.status,
            "created_at": iso(self.created_at),
            "processed_at": iso(self.processed_at),
            "processed_by": self.processed_by,
        }
