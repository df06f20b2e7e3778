from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from .tenant import Base


class MaintenanceRequest(Base):
    __tablename__ = "maintenance_requests"

    id = Column(Integer, primary_key=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    priority = Column(String(20), default="normal")  # urgent, normal, low
    status = Column(String(50), default="submitted")  # submitted, in_progress, completed
    created_at = Column(DateTime, default=datetime.utcnow)
    completed_at = Column(DateTime)
