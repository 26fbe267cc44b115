# assetdesk/services/tx.py
from contextlib import contextmanager

from ..exceptions import NotFoundError
from ..extensions import db
from ..models.asset import Asset
from ..models.user import User


@contextmanager
def atomic():
    """Commit once on success; roll back and re-raise on any error."""
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def lock_asset(asset_id) -> Asset:
    # row lock for the read-modify-write; a no-op on SQLite
    asset = (
        Asset.query
        .filter(Asset.id == asset_id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    if asset is None:
        raise NotFoundError("Asset not found")
    return asset


def get_user(user_id, label: str = "User") -> User:
    user = db.session.get(User, user_id) if user_id is not None else None
    if user is None:
        raise NotFoundError(f"{label} not found")
    return user
