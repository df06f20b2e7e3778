from sqlalchemy import Column, Integer, String, Date, Boolean, ForeignKey
from .tenant import Base


class GuestProfile(Base):
    __tablename__ = "guest_profiles"

    id = Column(Integer, primary_key=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False)
    guest_name = Column(String(255), nullable=False)
    check_in_date = Column(Date)
    check_out_date = Column(Date)
    is_active = Column(Boolean, default=True)
    has_moved_out = Column(Boolean, default=False)
