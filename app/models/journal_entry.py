from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Text, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base
import uuid


class JournalEntry(Base):
    """Daily mood journal entry. Not consumed by any XP logic."""
    __tablename__ = "journal_entries"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    mood = Column(Integer, nullable=False)  # 1 (terrible) .. 5 (great)
    note = Column(Text, nullable=False)

    user = relationship("User", back_populates="journal_entries")

    __table_args__ = (
        CheckConstraint("mood BETWEEN 1 AND 5", name="ck_journal_entries_mood_range"),
    )

    def __repr__(self) -> str:
        return f"<JournalEntry id={self.id} user_id={self.user_id} mood={self.mood}>"
