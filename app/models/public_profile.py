from sqlalchemy import Column, String, DateTime, Integer, Boolean, ForeignKey, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class PublicProfile(Base):
    """
    Denormalized snapshot a user chooses to publish.

    Written only by its owner; readable by anyone holding the user ID while
    ``is_enabled`` is set.
    """
    __tablename__ = "public_profiles"

    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)

    display_name = Column(String, nullable=True)
    photo_url = Column(String, nullable=True)
    level = Column(Integer, nullable=False, default=1)
    total_xp = Column(Integer, nullable=False, default=0)
    active_streak_days = Column(Integer, nullable=False, default=0)
    active_streak_start_date = Column(DateTime(timezone=True), nullable=True)
    badges = Column(JSON, nullable=False, default=list)
    success_rate = Column(Integer, nullable=False, default=0)

    # Visibility settings
    is_enabled = Column(Boolean, nullable=False, default=False)
    show_name = Column(Boolean, nullable=False, default=True)
    show_level = Column(Boolean, nullable=False, default=True)
    show_active_streak = Column(Boolean, nullable=False, default=True)
    show_badges = Column(Boolean, nullable=False, default=False)
    show_stats = Column(Boolean, nullable=False, default=False)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="public_profile")

    def __repr__(self) -> str:
        return f"<PublicProfile user_id={self.user_id} enabled={self.is_enabled} level={self.level}>"
