"""
Tour catalog: tours, their promotions and template itinerary days
"""
from sqlalchemy import (
    Column, String, Boolean, Integer, Text, Date, ForeignKey, Numeric, JSON
)
from sqlalchemy.orm import relationship

from tourbook.extensions import db


class Tour(db.Model):
    __tablename__ = "tours"

    tour_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    destination = Column(String(255), nullable=True)
    duration_days = Column(Integer, nullable=True)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    availability = Column(Boolean, nullable=False, default=True)
    image_url = Column(String(500), nullable=True)
    # Default guide copied onto new bookings
    tour_guide_id = Column(Integer, ForeignKey("tourguides.tour_guide_id", ondelete="SET NULL"), nullable=True)

    itinerary_days = relationship(
        "ItineraryDay",
        back_populates="tour",
        order_by=lambda: [ItineraryDay.day_number, ItineraryDay.itinerary_id],
        cascade="all, delete-orphan",
    )
    promotions = relationship("Promotion", back_populates="tour", cascade="all, delete-orphan")

    def __repr__(self):
        return f'<Tour {self.tour_id} {self.name}>'


class Promotion(db.Model):
    __tablename__ = "promotion"

    promoid = Column(Integer, primary_key=True, autoincrement=True)
    tour_id = Column(Integer, ForeignKey("tours.tour_id", ondelete="CASCADE"), nullable=False, index=True)
    # Percentage discount
    dis = Column(Numeric(5, 2), nullable=False)
    # Last day the promotion applies; NULL never expires
    date = Column(Date, nullable=True)

    tour = relationship("Tour", back_populates="promotions")


class ItineraryDay(db.Model):
    """One day of a tour's template itinerary"""
    __tablename__ = "itinerary"

    itinerary_id = Column(Integer, primary_key=True, autoincrement=True)
    tour_id = Column(Integer, ForeignKey("tours.tour_id", ondelete="CASCADE"), nullable=False, index=True)
    day_number = Column(Integer, nullable=False)
    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    activities = Column(JSON, nullable=True)
    accommodation = Column(String(255), nullable=True)
    meals = Column(String(255), nullable=True)

    tour = relationship("Tour", back_populates="itinerary_days")

    def to_dict(self):
        return {
            "itinerary_id": self.itinerary_id,
            "tour_id": self.tour_id,
            "day_number": self.day_number,
            "title": self.title,
            "description": self.description,
            "activities": self.activities or [],
            "accommodation": self.accommodation,
            "meals": self.meals,
        }
