"""Notification model (employee inbox)"""
from sqlalchemy import Column, String, Boolean, Integer, Text, DateTime, ForeignKey

from tourbook.extensions import db
from tourbook.models.base import utcnow, iso


class Notification(db.Model):
    __tablename__ = "notification"

    notification_id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String(50), nullable=False, index=True)  # refund_request, change_request
    booking_id = Column(Integer, ForeignKey("bookings.booking_id", ondelete="CASCADE"), nullable=True)
    customer_id = Column(Integer, ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True)
    customer_name = Column(String(255), nullable=True)
    customer_email = Column(String(255), nullable=True)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow)

    def to_dict(self):
        return {
            "notification_id": self.notification_id,
            "type": self.type,
            "booking_id": self.booking_id,
            "customer_id": self.customer_id,
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "message": self.message,
            "is_read": bool(self.is_read),
            "created_at": iso(self.created_at),
        }
