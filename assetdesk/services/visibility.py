# assetdesk/services/visibility.py
"""Single-asset view decision.

``can_view`` is the only question answered here. Two global rules run before
the per-mode evaluator:

* the uploader always sees their own asset;
* an ADMIN sees every SEO asset whatever its mode. DOC assets are personal
  documents, so an ADMIN is evaluated like anyone else for them.

Everything else is decided by exactly one evaluator per ``Visibility`` member.
Grant lookups go through ``directory`` (defaults to the SQL-backed
``ShareDirectory``) so the functions stay free of ambient state.
"""
from __future__ import annotations

import logging
from typing import Callable, Protocol

from ..exceptions import ValidationError
from ..models.enums import UploadType, UserRole, Visibility

log = logging.getLogger(__name__)


class GrantLookup(Protocol):
    def has_user_grant(self, asset_id: int, user_id: int) -> bool: ...

    def has_role_grant(self, asset_id: int, role) -> bool: ...


def _default_directory() -> GrantLookup:
    from .share_directory import ShareDirectory
    return ShareDirectory()


# ---- enum helpers ----

def is_valid_visibility(value) -> bool:
    try:
        Visibility(value)
    except ValueError:
        return False
    return True


def parse_visibility(value) -> Visibility:
    if value is None or value == "":
        raise ValidationError("Visibility is required", fields={"visibility": "required"})
    try:
        return Visibility(getattr(value, "value", value))
    except ValueError:
        raise ValidationError(
            f"Invalid visibility level: {value}",
            fields={"visibility": f"must be one of {', '.join(all_visibility_levels())}"},
        ) from None


def all_visibility_levels() -> list[str]:
    return [v.value for v in Visibility]


# ---- per-mode evaluators ----

def evaluate_public(user, asset, directory: GrantLookup) -> bool:
    return True


def evaluate_uploader_only(user, asset, directory: GrantLookup) -> bool:
    if user.id == asset.uploader_id:
        return True
    return directory.has_user_grant(asset.id, user.id)


def evaluate_admin_only(user, asset, directory: GrantLookup) -> bool:
    return user.role == UserRole.ADMIN or user.id == asset.uploader_id


def evaluate_company(user, asset, directory: GrantLookup) -> bool:
    if not user.company_id or not asset.company_id:
        return False
    return user.company_id == asset.company_id


def evaluate_team(user, asset, directory: GrantLookup) -> bool:
    # no team model yet: never allow
    return False


def evaluate_role(user, asset, directory: GrantLookup) -> bool:
    if asset.allowed_role:
        return user.role == asset.allowed_role
    return directory.has_role_grant(asset.id, user.role)


def evaluate_selected_users(user, asset, directory: GrantLookup) -> bool:
    return directory.has_user_grant(asset.id, user.id)


Evaluator = Callable[..., bool]

EVALUATORS: dict[Visibility, Evaluator] = {
    Visibility.PUBLIC: evaluate_public,
    Visibility.UPLOADER_ONLY: evaluate_uploader_only,
    Visibility.ADMIN_ONLY: evaluate_admin_only,
    Visibility.COMPANY: evaluate_company,
    Visibility.TEAM: evaluate_team,
    Visibility.ROLE: evaluate_role,
    Visibility.SELECTED_USERS: evaluate_selected_users,
}

# a new Visibility member without an evaluator must fail at import time
assert set(EVALUATORS) == set(Visibility), "visibility evaluators out of sync with Visibility"


def admin_bypasses(user, asset) -> bool:
    return user.role == UserRole.ADMIN and asset.upload_type == UploadType.SEO


def can_view(user, asset, directory: GrantLookup | None = None) -> bool:
    if user.id == asset.uploader_id:
        return True
    if admin_bypasses(user, asset):
        return True

    mode = parse_visibility(asset.visibility)
    return EVALUATORS[mode](user, asset, directory or _default_directory())
