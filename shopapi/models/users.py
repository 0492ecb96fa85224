# shopapi/models/users.py
import enum

from sqlalchemy import Column, String, DateTime, Enum
from sqlalchemy.orm import relationship

from shopapi.database import Base
from shopapi.utils.ids import generate_id, utcnow


class UserRole(str, enum.Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


# Represents a user account with authentication details and system role
class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=generate_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        Enum(UserRole, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.CUSTOMER,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")
