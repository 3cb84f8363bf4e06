from app.database import Base
from app.models.user import User
from app.models.streak import Streak
from app.models.journal_entry import JournalEntry
from app.models.public_profile import PublicProfile

__all__ = ["Base", "User", "Streak", "JournalEntry", "PublicProfile"]
