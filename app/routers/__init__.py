# API Routers
from app.routers import users, streaks, gamification, stats, journal, public_profile

__all__ = ["users", "streaks", "gamification", "stats", "journal", "public_profile"]
