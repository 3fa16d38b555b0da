"""Rating model"""
from sqlalchemy import (
    Column, String, Integer, Text, DateTime, ForeignKey, CheckConstraint, UniqueConstraint
)

from tourbook.extensions import db
from tourbook.models.base import utcnow, iso

SUBJECT_TYPES = ('tourguide', 'driver', 'tour')


class Rating(db.Model):
    __tablename__ = "ratings"

    rating_id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(Integer, ForeignKey("bookings.booking_id", ondelete="CASCADE"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    subject_type = Column(String(20), nullable=False)
    subject_id = Column(Integer, nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_rating_value"),
        UniqueConstraint("booking_id", "subject_type", name="uq_rating_booking_subject"),
    )

    def to_dict(self):
        return {
            "rating_id": self.rating_id,
            "booking_id": self.booking_id,
            "customer_id": self.customer_id,
            "subject_type": self.subject_type,
            "subject_id": self.subject_id,
            "rating": self.rating,
            "comment": self.comment,
            "created_at": iso(self.created_at),
        }
