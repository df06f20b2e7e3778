from datetime import datetime
from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, Text
from .tenant import Base


class Room(Base):
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True)
    number = Column(String(50), nullable=False)
    building_id = Column(Integer)
    status = Column(String(50), nullable=False, default="available")  # available, occupied, cleaning, out_of_service
    size = Column(String(50), default="standard")
    floor = Column(Integer, default=1)
    description = Column(Text)
    amenities = Column(Text)
    last_cleaned = Column(Date)
    rental_rate = Column(Numeric(10, 2))
    rental_period = Column(String(20))  # daily, weekly, monthly
    created_at = Column(DateTime, default=datetime.utcnow)
