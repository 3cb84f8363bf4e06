from app.crud.user import (
    get_user,
    get_user_for_update,
    create_user,
    update_user_fields,
    set_target_streak,
    increment_total_xp,
    set_recalculated_ledger,
)
from app.crud.streak import (
    get_active_streak,
    get_streak,
    list_streaks,
    add_streak,
    close_streak,
    update_start_date,
    update_reflection,
    delete_streak,
    delete_streaks,
)
from app.crud.journal import (
    create_journal_entry,
    get_journal_entries,
    get_all_journal_entries,
    get_journal_entry_since,
)
from app.crud.public_profile import (
    get_public_profile,
    upsert_public_profile,
)

__all__ = [
    # User operations
    "get_user",
    "get_user_for_update",
    "create_user",
    "update_user_fields",
    "set_target_streak",

    # Ledger operations
    "increment_total_xp",
    "set_recalculated_ledger",

    # Streak operations
    "get_active_streak",
    "get_streak",
    "list_streaks",
    "add_streak",
    "close_streak",
    "update_start_date",
    "update_reflection",
    "delete_streak",
    "delete_streaks",

    # Journal operations
    "create_journal_entry",
    "get_journal_entries",
    "get_all_journal_entries",
    "get_journal_entry_since",

    # Public profile operations
    "get_public_profile",
    "upsert_public_profile",
]
