# assetdesk/services/list_filter.py
"""Collection-level visibility.

Two passes that must agree with each other and with ``visibility.can_view``:

1. ``visible_clause(user)``: a SQLAlchemy boolean expression over ``Asset``
   (share checks become correlated EXISTS subqueries), used to paginate in
   the database;
2. ``filter_assets_by_role(user, assets)``: a row-level pass through the
   policy evaluator, run on every page the query returns.

``can_list`` states the combined rule for a single asset. Role rules:
CONTENT_CREATOR sees whatever ``can_view`` allows; SEO_SPECIALIST sees own
uploads plus APPROVED assets ``can_view`` allows; ADMIN sees every SEO asset
and DOC assets they uploaded or received.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime

from flask import current_app
from sqlalchemy import and_, false, or_

from ..exceptions import AuthorizationError, ValidationError
from ..models.asset import Asset
from ..models.enums import AssetStatus, AssetType, UploadType, UserRole, Visibility
from ..models.user import User
from .share_directory import role_grant_clause, user_grant_clause
from .visibility import can_view, parse_visibility

log = logging.getLogger(__name__)

SORT_FIELDS = {
    "uploaded_at": Asset.uploaded_at,
    "title": Asset.title,
    "approved_at": Asset.approved_at,
    "file_size": Asset.file_size,
}


# ---- single-item rule ----

def can_list(user, asset, directory=None) -> bool:
    if user.id == asset.uploader_id:
        return True
    if user.role == UserRole.SEO_SPECIALIST and asset.status != AssetStatus.APPROVED:
        return False
    return can_view(user, asset, directory)


def filter_assets_by_role(user, assets, directory=None) -> list:
    return [a for a in assets if can_list(user, a, directory)]


# ---- storage-layer predicate ----

def _mode_clauses(user) -> list:
    """One clause per visibility mode the user can pass, ownership excluded."""
    clauses = [Asset.visibility == Visibility.PUBLIC]

    grant = user_grant_clause(user.id)
    clauses.append(and_(Asset.visibility == Visibility.UPLOADER_ONLY, grant))
    clauses.append(and_(Asset.visibility == Visibility.SELECTED_USERS, grant))

    if user.role == UserRole.ADMIN:
        clauses.append(Asset.visibility == Visibility.ADMIN_ONLY)

    if user.company_id:
        clauses.append(and_(
            Asset.visibility == Visibility.COMPANY,
            Asset.company_id.isnot(None),
            Asset.company_id == user.company_id,
        ))

    # TEAM contributes nothing

    clauses.append(and_(
        Asset.visibility == Visibility.ROLE,
        or_(
            Asset.allowed_role == user.role,
            and_(Asset.allowed_role.is_(None), role_grant_clause(user.role)),
        ),
    ))
    return clauses


def visible_clause(user):
    own = Asset.uploader_id == user.id
    by_mode = or_(*_mode_clauses(user))

    if user.role == UserRole.ADMIN:
        return or_(own, Asset.upload_type == UploadType.SEO, by_mode)
    if user.role == UserRole.SEO_SPECIALIST:
        return or_(own, and_(Asset.status == AssetStatus.APPROVED, by_mode))
    if user.role == UserRole.CONTENT_CREATOR:
        return or_(own, by_mode)
    return false()


def visible_assets_query(user):
    return Asset.query.filter(visible_clause(user))


# ---- search ----

@dataclass
class SearchPage:
    assets: list = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 20
    total_pages: int = 0

    def to_dict(self) -> dict:
        return {
            "assets": [a.to_dict() for a in self.assets],
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "total_pages": self.total_pages,
        }


def _enum_filter(enum_cls, value, name):
    if value is None:
        return None
    try:
        return enum_cls(getattr(value, "value", value))
    except ValueError:
        raise ValidationError(f"Invalid {name}: {value}", fields={name: "invalid value"}) from None


def _page_size(limit) -> int:
    default = current_app.config.get("SEARCH_PAGE_SIZE", 20)
    cap = current_app.config.get("SEARCH_MAX_PAGE_SIZE", 100)
    if limit is None:
        return default
    try:
        limit = int(limit)
    except (TypeError, ValueError):
        raise ValidationError("Limit must be a number", fields={"limit": "not a number"}) from None
    if limit < 1:
        raise ValidationError("Limit must be positive", fields={"limit": "must be >= 1"})
    return min(limit, cap)


def _page_number(page) -> int:
    if page is None or page == "":
        return 1
    try:
        page = int(page)
    except (TypeError, ValueError):
        raise ValidationError("Page must be a number", fields={"page": "not a number"}) from None
    return max(page, 1)


def search_assets(
    user,
    *,
    query: str | None = None,
    title: str | None = None,
    description: str | None = None,
    tags: list[str] | None = None,
    company_id: int | None = None,
    asset_type=None,
    status=None,
    visibility=None,
    upload_type=None,
    uploader_id: int | None = None,
    uploader_role=None,
    uploaded_after: datetime | None = None,
    uploaded_before: datetime | None = None,
    approved_after: datetime | None = None,
    approved_before: datetime | None = None,
    sort_by: str = "uploaded_at",
    sort_order: str = "desc",
    page: int = 1,
    limit: int | None = None,
    directory=None,
) -> SearchPage:
    if sort_by not in SORT_FIELDS:
        raise ValidationError(f"Invalid sort field: {sort_by}", fields={"sort_by": ", ".join(SORT_FIELDS)})
    if sort_order not in ("asc", "desc"):
        raise ValidationError(f"Invalid sort order: {sort_order}", fields={"sort_order": "asc or desc"})

    limit = _page_size(limit)
    page = _page_number(page)

    q = visible_assets_query(user)

    if query and query.strip():
        like = f"%{query.strip()}%"
        q = q.filter(or_(Asset.title.ilike(like), Asset.description.ilike(like)))
    if title and title.strip():
        q = q.filter(Asset.title.ilike(f"%{title.strip()}%"))
    if description and description.strip():
        q = q.filter(Asset.description.ilike(f"%{description.strip()}%"))
    if company_id:
        q = q.filter(Asset.company_id == company_id)

    asset_type = _enum_filter(AssetType, asset_type, "asset_type")
    if asset_type:
        q = q.filter(Asset.asset_type == asset_type)
    status = _enum_filter(AssetStatus, status, "status")
    if status:
        q = q.filter(Asset.status == status)
    if visibility is not None:
        q = q.filter(Asset.visibility == parse_visibility(visibility))
    upload_type = _enum_filter(UploadType, upload_type, "upload_type")
    if upload_type:
        q = q.filter(Asset.upload_type == upload_type)
    if uploader_id:
        q = q.filter(Asset.uploader_id == uploader_id)
    uploader_role = _enum_filter(UserRole, uploader_role, "uploader_role")
    if uploader_role:
        q = q.filter(Asset.uploader.has(User.role == uploader_role))

    if uploaded_after:
        q = q.filter(Asset.uploaded_at >= uploaded_after)
    if uploaded_before:
        q = q.filter(Asset.uploaded_at <= uploaded_before)
    if approved_after:
        q = q.filter(Asset.approved_at >= approved_after)
    if approved_before:
        q = q.filter(Asset.approved_at <= approved_before)

    column = SORT_FIELDS[sort_by]
    q = q.order_by(column.asc() if sort_order == "asc" else column.desc(), Asset.id.desc())

    wanted = {t.strip().lower() for t in (tags or []) if t and t.strip()}
    if wanted:
        # JSON tag matching stays in Python so it works on every backend
        matched = [a for a in q.all() if wanted & {str(t).lower() for t in (a.tags or [])}]
        total = len(matched)
        rows = matched[(page - 1) * limit:page * limit]
    else:
        total = q.count()
        rows = q.offset((page - 1) * limit).limit(limit).all()

    visible = filter_assets_by_role(user, rows, directory)
    if len(visible) != len(rows):
        # the predicate and the evaluator disagree; the evaluator wins
        log.warning("list filter dropped %d row(s) for user=%s", len(rows) - len(visible), user.id)

    return SearchPage(
        assets=visible,
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit) if total else 0,
    )


def assets_by_ids(user, asset_ids, directory=None) -> list:
    ids = sorted({int(i) for i in (asset_ids or [])})
    if not ids:
        return []
    rows = Asset.query.filter(Asset.id.in_(ids)).order_by(Asset.id).all()
    return filter_assets_by_role(user, rows, directory)


def pending_review_assets(user) -> list:
    if user.role != UserRole.ADMIN:
        raise AuthorizationError("Only administrators can review assets")
    return (
        Asset.query
        .filter(Asset.status == AssetStatus.PENDING_REVIEW,
                Asset.upload_type == UploadType.SEO)
        .order_by(Asset.uploaded_at.desc(), Asset.id.desc())
        .all()
    )
