# assetdesk/services/permissions.py
"""Full action surface for one (user, asset) pair.

Everything here is a plain function of its arguments; ``view`` and the
checks derived from it accept the same optional grant ``directory`` as
``visibility.can_view``.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict

from ..models.enums import AssetStatus, UploadType, UserRole
from ..models.enums import SHAREABLE_VISIBILITIES
from .visibility import can_view, parse_visibility

EDITABLE_STATUSES = frozenset({AssetStatus.DRAFT, AssetStatus.REJECTED})

NO_VIEW_REASON = "User does not have permission to view this asset"
VIEW_ONLY_REASON = "User has view-only access to this asset"


@dataclass(frozen=True)
class PermissionSet:
    can_view: bool
    can_edit: bool
    can_delete: bool
    can_approve: bool
    can_download: bool
    can_share: bool
    can_modify_visibility: bool
    can_log_platform_usage: bool
    reason: str | None = None

    def as_dict(self) -> dict:
        return asdict(self)


def _is_admin(user) -> bool:
    return user.role == UserRole.ADMIN


def _is_uploader(user, asset) -> bool:
    return user.id == asset.uploader_id


def can_edit(user, asset) -> bool:
    if _is_admin(user):
        return True
    if _is_uploader(user, asset):
        return asset.status in EDITABLE_STATUSES
    return False


def can_delete(user, asset) -> bool:
    return can_edit(user, asset)


def can_approve(user, asset) -> bool:
    return (
        _is_admin(user)
        and asset.upload_type == UploadType.SEO
        and asset.status == AssetStatus.PENDING_REVIEW
    )


def can_download(user, asset, directory=None) -> bool:
    return can_view(user, asset, directory)


def can_share(user, asset) -> bool:
    # uploader only; an ADMIN cannot share somebody else's private asset
    if not _is_uploader(user, asset):
        return False
    return parse_visibility(asset.visibility) in SHAREABLE_VISIBILITIES


def can_modify_visibility(user, asset) -> bool:
    # DOC visibility is driven by sharing only
    return _is_admin(user) and asset.upload_type == UploadType.SEO


def can_log_platform_usage(user, asset, directory=None) -> bool:
    if not can_view(user, asset, directory):
        return False
    if asset.upload_type == UploadType.SEO and asset.status != AssetStatus.APPROVED:
        return False
    return True


def check_all_permissions(user, asset, directory=None) -> PermissionSet:
    view = can_view(user, asset, directory)
    edit = can_edit(user, asset)
    delete = can_delete(user, asset)
    approve = can_approve(user, asset)
    share = can_share(user, asset)
    modify = can_modify_visibility(user, asset)

    # same rules as can_download / can_log_platform_usage
    download = view
    log_usage = view and not (asset.upload_type == UploadType.SEO and asset.status != AssetStatus.APPROVED)

    reason = None
    if not view:
        reason = NO_VIEW_REASON
    elif not any((edit, delete, approve, share, modify)):
        reason = VIEW_ONLY_REASON

    return PermissionSet(
        can_view=view,
        can_edit=edit,
        can_delete=delete,
        can_approve=approve,
        can_download=download,
        can_share=share,
        can_modify_visibility=modify,
        can_log_platform_usage=log_usage,
        reason=reason,
    )
