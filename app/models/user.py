from sqlalchemy import Column, String, DateTime, Integer
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base

class User(Base):
    """User profile keyed by Firebase UID, holding the persisted XP ledger."""
    __tablename__ = "users"

    id = Column(String, primary_key=True)  # Firebase UID
    email = Column(String, unique=True, index=True, nullable=True)
    display_name = Column(String, nullable=True)
    photo_url = Column(String, nullable=True)

    # Ledger: equals the sum of per-streak contributions (see services.xp_calculator)
    total_xp = Column(Integer, nullable=False, default=0, server_default="0")
    xp_version = Column(Integer, nullable=True)  # NULL = never recalculated

    target_streak = Column(Integer, nullable=False, default=0, server_default="0")  # personal goal in days
    timezone = Column(String, nullable=True)  # IANA name used for calendar-day counting

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    streaks = relationship("Streak", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    journal_entries = relationship("JournalEntry", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    public_profile = relationship("PublicProfile", back_populates="user", uselist=False, cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<User id={self.id} email={self.email} total_xp={self.total_xp} xp_version={self.xp_version}>"
