import datetime as dt

from sqlalchemy import Column, Integer, String, Date, DateTime, func

from collecta.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    username = Column(String(50), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    hashed_password = Column(String(128), nullable=False)

    date_of_birth = Column(Date, nullable=True)
    date_of_registration = Column(Date, nullable=False, default=dt.date.today)
    profile_picture = Column(String(256), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
