from sqlalchemy.orm import Session
from sqlalchemy import or_
from app.config import CURRENT_XP_VERSION
from app.models import User
from typing import Optional

def get_user(db: Session, user_id: str) -> Optional[User]:
    """Get a user by ID."""
    return db.query(User).filter(User.id == user_id).first()

def get_user_for_update(db: Session, user_id: str) -> Optional[User]:
    """
    Get a user and lock the row until the surrounding transaction ends.

    Serializes streak lifecycle operations of one user across sessions.
    Ignored by SQLite, which serializes writers anyway.
    """
    return db.query(User).filter(User.id == user_id).with_for_update().first()

def create_user(db: Session, user_id: str, email: Optional[str], display_name: Optional[str], photo_url: Optional[str] = None) -> User:
    """
    Create a new user.

    New users have no history, so their (empty) ledger is already at the
    current XP formula version.
    """
    db_user = User(
        id=user_id,
        email=email,
        display_name=display_name,
        photo_url=photo_url,
        total_xp=0,
        xp_version=CURRENT_XP_VERSION,
        target_streak=0,
    )

    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user

def update_user_fields(db: Session, user: User, update_data: dict) -> User:
    """Update plain profile fields. Ledger fields are never written through here."""
    for field, value in update_data.items():
        if field in ("total_xp", "xp_version"):
            continue
        if hasattr(user, field):
            setattr(user, field, value)

    db.commit()
    db.refresh(user)
    return user

def set_target_streak(db: Session, user_id: str, target_streak: int) -> Optional[User]:
    """Set the personal streak goal (days)."""
    db_user = get_user(db, user_id)
    if db_user:
        db_user.target_streak = target_streak
        db.commit()
        db.refresh(db_user)
    return db_user

def increment_total_xp(db: Session, user_id: str, delta: int) -> int:
    """
    Stage an atomic server-side ``total_xp = total_xp + delta``.

    Does not commit: callers batch it with the streak writes it accounts for.
    Returns the number of rows matched.
    """
    if delta == 0:
        return 0
    return db.query(User).filter(User.id == user_id).update(
        {User.total_xp: User.total_xp + delta},
        synchronize_session=False,
    )

def set_recalculated_ledger(db: Session, user_id: str, total_xp: int, xp_version: int) -> int:
    """
    Stage ``{total_xp, xp_version}`` as one write, only if the stored version is older.

    A concurrent recalculation that already bumped the version makes this a
    no-op (rowcount 0). Does not commit.
    """
    return db.query(User).filter(
        User.id == user_id,
        or_(User.xp_version.is_(None), User.xp_version < xp_version),
    ).update(
        {User.total_xp: total_xp, User.xp_version: xp_version},
        synchronize_session=False,
    )
