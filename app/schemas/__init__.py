from app.schemas.user import UserBase, UserResponse, CurrentUser, UserUpdate, GoalUpdate
from app.schemas.streak import (
    StreakOut, RelapseRequest, ReflectionUpdate, PastStreakCreate, StartDateUpdate,
    StreakMutationResponse, StreakHistoryResponse
)
from app.schemas.gamification import (
    LiveViewResponse, LedgerResponse, ProjectionResponse, ActiveStreakResponse,
    ProgressResponse, BadgeResponse, BadgesResponse, MotivationResponse
)
from app.schemas.journal import JournalEntryCreate, JournalEntryResponse
from app.schemas.public_profile import PublicProfileSettings, PublicProfileResponse, PublicProfileSaveResponse
from app.schemas.stats import MoodPoint, StatsResponse

__all__ = [
    "UserBase", "UserResponse", "CurrentUser", "UserUpdate", "GoalUpdate",
    "StreakOut", "RelapseRequest", "ReflectionUpdate", "PastStreakCreate", "StartDateUpdate",
    "StreakMutationResponse", "StreakHistoryResponse",
    "LiveViewResponse", "LedgerResponse", "ProjectionResponse", "ActiveStreakResponse",
    "ProgressResponse", "BadgeResponse", "BadgesResponse", "MotivationResponse",
    "JournalEntryCreate", "JournalEntryResponse",
    "PublicProfileSettings", "PublicProfileResponse", "PublicProfileSaveResponse",
    "MoodPoint", "StatsResponse",
]
