from sqlalchemy import Column, String, Boolean, DateTime, Uuid
import uuid

from coedit.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(String(100), unique=True, index=True, nullable=False)
    email = Column(String(255))
    password = Column(String(255), nullable=False)
    token = Column(String(255), default="")
    email_verified = Column(Boolean, default=False, nullable=False)
    joined_date = Column(DateTime(timezone=True))
