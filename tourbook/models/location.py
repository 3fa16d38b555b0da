"""LocationPing model, one row per GPS update"""
from sqlalchemy import Column, String, Float, Integer, DateTime, ForeignKey, Index

from tourbook.extensions import db
from tourbook.models.base import utcnow, iso


class LocationPing(db.Model):
    __tablename__ = "location_tracking"

    location_id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(Integer, ForeignKey("bookings.booking_id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    user_type = Column(String(20), nullable=False)  # customer, tourguide, driver
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    accuracy = Column(Float, nullable=True)
    altitude = Column(Float, nullable=True)
    speed = Column(Float, nullable=True)
    heading = Column(Float, nullable=True)
    timestamp = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_location_booking_user_time", "booking_id", "user_id", "timestamp"),
    )

    def to_dict(self):
        return {
            "location_id": self.location_id,
            "booking_id": self.booking_id,
            "user_id": self.user_id,
            "user_type": self.user_type,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "accuracy": self.accuracy,
            "altitude": self.altitude,
            "speed": self.speed,
            "heading": self.heading,
            "timestamp": iso(self.timestamp),
        }
