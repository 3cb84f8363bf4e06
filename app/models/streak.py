from sqlalchemy import Column, String, DateTime, ForeignKey, Index, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base
import uuid


class Streak(Base):
    """A continuous span of discipline; ``end_date`` NULL marks the active streak."""
    __tablename__ = "streaks"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Nullable so legacy rows without a usable start survive; they are skipped in every XP sum
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    # Zone the streak was credited in; fixes its day count once it is closed
    timezone = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    relapse_reason = Column(String(100), nullable=True)
    relapse_notes = Column(Text, nullable=True)

    user = relationship("User", back_populates="streaks")

    __table_args__ = (
        Index("ix_streaks_user_id_start_date", "user_id", "start_date"),
        # At most one open streak per user
        Index(
            "uq_streaks_one_open_per_user",
            "user_id",
            unique=True,
            postgresql_where=end_date.is_(None),
            sqlite_where=end_date.is_(None),
        ),
    )

    @property
    def is_active(self) -> bool:
        return self.end_date is None

    def __repr__(self) -> str:
        return (
            f"<Streak id={self.id} user_id={self.user_id} "
            f"start={self.start_date} end={self.end_date}>"
        )
