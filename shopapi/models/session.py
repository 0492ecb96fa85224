# shopapi/models/session.py
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship

from shopapi.database import Base
from shopapi.utils.ids import generate_id, utcnow


# Refresh token issued at login; removed on logout
class UserSession(Base):
    __tablename__ = "sessions"

    id = Column(String(32), primary_key=True, default=generate_id)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    refresh_token = Column(Text, nullable=False)
    is_blocked = Column(Boolean, nullable=False, default=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    user = relationship("User", back_populates="sessions")
