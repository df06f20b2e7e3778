from sqlalchemy import Column, Integer, String, Numeric
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase


class Base(AsyncAttrs, DeclarativeBase):
    pass


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(Integer, primary_key=True)
    name = Column(String(255))
    room_number = Column(String(50))
    status = Column(String(50), nullable=False, default="active")  # active, inactive, moved_out
    monthly_rent = Column(Numeric(10, 2))
    stay_duration = Column(Integer)  # months
