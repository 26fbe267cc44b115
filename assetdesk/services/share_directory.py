# assetdesk/services/share_directory.py
"""Read side of the grant relation (``asset_share``).

The policy evaluator only needs two questions answered: "is there a USER grant
for this (asset, user)?" and "is there a ROLE grant for this (asset, role)?".
``ShareDirectory`` answers them with point queries; the ``*_clause`` helpers
answer the same questions as correlated EXISTS subqueries so the list filter
can push them into one SQL statement.
"""
from __future__ import annotations

from sqlalchemy import exists, func, and_

from ..extensions import db
from ..models.asset import Asset
from ..models.enums import ShareTarget
from ..models.share import AssetShare


def _role_value(role) -> str:
    return getattr(role, "value", role)


class ShareDirectory:
    """SQL-backed grant lookups over the current session."""

    def has_user_grant(self, asset_id: int, user_id: int) -> bool:
        q = db.session.query(
            exists().where(
                AssetShare.asset_id == asset_id,
                AssetShare.shared_with_id == user_id,
                AssetShare.target_type == ShareTarget.USER,
            )
        )
        return bool(q.scalar())

    def has_role_grant(self, asset_id: int, role) -> bool:
        q = db.session.query(
            exists().where(
                AssetShare.asset_id == asset_id,
                AssetShare.target_type == ShareTarget.ROLE,
                AssetShare.target_id == _role_value(role),
            )
        )
        return bool(q.scalar())

    def grant_for(self, asset_id: int, user_id: int) -> AssetShare | None:
        return AssetShare.query.filter_by(asset_id=asset_id, shared_with_id=user_id).first()

    def grants_for_asset(self, asset_id: int) -> list[AssetShare]:
        return (
            AssetShare.query
            .filter_by(asset_id=asset_id)
            .order_by(AssetShare.created_at.desc(), AssetShare.id.desc())
            .all()
        )

    def grants_for_role(self, role) -> list[AssetShare]:
        return (
            AssetShare.query
            .filter(AssetShare.target_type == ShareTarget.ROLE,
                    AssetShare.target_id == _role_value(role))
            .all()
        )

    def shared_asset_ids(self, user_id: int) -> list[int]:
        rows = (
            db.session.query(AssetShare.asset_id)
            .filter(AssetShare.shared_with_id == user_id,
                    AssetShare.target_type == ShareTarget.USER)
            .all()
        )
        return [r.asset_id for r in rows]

    def count_for_asset(self, asset_id: int) -> int:
        return (
            db.session.query(func.count(AssetShare.id))
            .filter(AssetShare.asset_id == asset_id)
            .scalar()
        ) or 0


def user_grant_clause(user_id: int):
    """EXISTS(USER grant for the outer Asset row and ``user_id``)."""
    return exists().where(and_(
        AssetShare.asset_id == Asset.id,
        AssetShare.shared_with_id == user_id,
        AssetShare.target_type == ShareTarget.USER,
    ))


def role_grant_clause(role):
    """EXISTS(ROLE grant for the outer Asset row and ``role``)."""
    return exists().where(and_(
        AssetShare.asset_id == Asset.id,
        AssetShare.target_type == ShareTarget.ROLE,
        AssetShare.target_id == _role_value(role),
    ))
