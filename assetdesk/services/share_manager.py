# assetdesk/services/share_manager.py
"""Write side of the grant relation.

Sharing is for private (DOC-style) assets only: the asset must be
UPLOADER_ONLY or SELECTED_USERS and only its uploader may share it. The first
share flips UPLOADER_ONLY to SELECTED_USERS; revoking the last grant flips it
back. Both flips happen inside the same locked transaction as the grant
change, so two concurrent revokes cannot both see "one grant left".
"""
from __future__ import annotations

import logging

from flask import current_app

from ..exceptions import AuthorizationError, NotFoundError, ValidationError
from ..extensions import db
from ..models.asset import Asset
from ..models.enums import SHAREABLE_VISIBILITIES, ShareTarget, UserRole, Visibility
from ..models.share import AssetShare
from ..models.user import User
from . import audit_service, notification_service
from .share_directory import ShareDirectory
from .tx import atomic, get_user, lock_asset

log = logging.getLogger(__name__)


def _unique_ids(ids) -> list[int]:
    seen, out = set(), []
    for raw in ids or []:
        try:
            i = int(raw)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid recipient id: {raw}", fields={"recipient_ids": "must be ids"}) from None
        if i not in seen:
            seen.add(i)
            out.append(i)
    return out


def _parse_target(target_type) -> ShareTarget:
    if target_type is None:
        return ShareTarget.USER
    try:
        target = ShareTarget(getattr(target_type, "value", target_type))
    except ValueError:
        raise ValidationError(f"Invalid target type: {target_type}",
                              fields={"target_type": "USER, ROLE or TEAM"}) from None
    if target == ShareTarget.TEAM:
        raise ValidationError("Team sharing is not supported yet", fields={"target_type": "not supported"})
    if target == ShareTarget.ROLE:
        # UPLOADER_ONLY and SELECTED_USERS read USER grants only
        raise ValidationError("Shared assets can only be granted to users; use ROLE visibility for roles",
                              fields={"target_type": "USER only"})
    return target


def share_asset(asset_id: int, sharer_id: int, recipient_ids, target_type=None, target_id=None,
                *, ip_address=None, user_agent=None) -> list[AssetShare]:
    recipients_wanted = _unique_ids(recipient_ids)
    if not recipients_wanted:
        raise ValidationError("At least one recipient is required", fields={"recipient_ids": "required"})
    cap = current_app.config.get("SHARE_MAX_RECIPIENTS", 50)
    if len(recipients_wanted) > cap:
        raise ValidationError(f"Cannot share with more than {cap} users at once",
                              fields={"recipient_ids": f"at most {cap}"})
    # target_id only ever named a role, and role targets are refused below
    target = _parse_target(target_type)

    created: list[AssetShare] = []
    with atomic():
        asset = lock_asset(asset_id)
        if asset.uploader_id != sharer_id:
            log.warning("share denied: user=%s asset=%s", sharer_id, asset.id)
            raise AuthorizationError("Only the uploader can share this asset")
        if asset.visibility not in SHAREABLE_VISIBILITIES:
            raise ValidationError("Can only share assets with UPLOADER_ONLY or SELECTED_USERS visibility",
                                  fields={"visibility": asset.visibility.value})
        sharer = get_user(sharer_id, "Sharer")

        found = {u.id for u in User.query.filter(User.id.in_(recipients_wanted)).all()}
        missing = [i for i in recipients_wanted if i not in found]
        if missing:
            raise NotFoundError("One or more recipients not found", fields={"recipient_ids": missing})
        if sharer.id in found:
            raise ValidationError("Cannot share asset with yourself", fields={"recipient_ids": "contains sharer"})

        ctx = dict(ip_address=ip_address, user_agent=user_agent)
        if asset.visibility == Visibility.UPLOADER_ONLY:
            asset.visibility = Visibility.SELECTED_USERS
            audit_service.log_visibility_change(sharer.id, asset.id, Visibility.UPLOADER_ONLY,
                                                Visibility.SELECTED_USERS,
                                                {"reason": "Asset shared with users"}, **ctx)

        directory = ShareDirectory()
        shares = []
        for recipient_id in recipients_wanted:
            existing = directory.grant_for(asset.id, recipient_id)
            if existing is not None and existing.target_type == ShareTarget.USER:
                shares.append(existing)
                continue
            if existing is not None:
                # a non-USER grant gives no access here; upgrade it in place
                existing.target_type, existing.target_id = ShareTarget.USER, None
                existing.shared_by_id = sharer.id
                shares.append(existing)
                created.append(existing)
                continue
            grant = AssetShare(
                shared_by_id=sharer.id,
                shared_with_id=recipient_id,
                target_type=target,
            )
            asset.shares.append(grant)
            shares.append(grant)
            created.append(grant)

        audit_service.log_asset_share(sharer.id, asset.id, {
            "action": "share",
            "shared_with_ids": recipients_wanted,
            "shared_with_count": len(shares),
            "created_count": len(created),
            "target_type": target,
        }, **ctx)

    log.info("asset %s shared by user=%s with %d recipient(s), %d new",
             asset.id, sharer.id, len(shares), len(created))
    for grant in created:
        notification_service.notify_share_recipient(asset, grant.shared_with_id, sharer.name)
    return shares


def revoke_share(asset_id: int, sharer_id: int, recipient_id: int, *, ip_address=None, user_agent=None):
    with atomic():
        asset = lock_asset(asset_id)
        if asset.uploader_id != sharer_id:
            log.warning("revoke denied: user=%s asset=%s", sharer_id, asset.id)
            raise AuthorizationError("Only the uploader can revoke sharing")

        directory = ShareDirectory()
        grant = directory.grant_for(asset.id, recipient_id)
        if grant is None:
            raise NotFoundError("Share not found")

        revoked = grant.to_dict()
        if grant in asset.shares:
            asset.shares.remove(grant)
        else:
            db.session.delete(grant)
        db.session.flush()

        ctx = dict(ip_address=ip_address, user_agent=user_agent)
        remaining = directory.count_for_asset(asset.id)
        if remaining == 0 and asset.visibility == Visibility.SELECTED_USERS:
            asset.visibility = Visibility.UPLOADER_ONLY
            audit_service.log_visibility_change(sharer_id, asset.id, Visibility.SELECTED_USERS,
                                                Visibility.UPLOADER_ONLY,
                                                {"reason": "Last share revoked"}, **ctx)

        audit_service.log_asset_share(sharer_id, asset.id, {
            "action": "revoke",
            "revoked_from_id": recipient_id,
            "target_type": revoked["target_type"],
            "remaining": remaining,
        }, **ctx)

    log.info("asset %s: share with user=%s revoked (%d left)", asset_id, recipient_id, remaining)


def list_shares(asset_id: int, actor_id: int) -> list[AssetShare]:
    asset = db.session.get(Asset, asset_id)
    if asset is None:
        raise NotFoundError("Asset not found")
    actor = get_user(actor_id)
    if actor.id != asset.uploader_id and actor.role != UserRole.ADMIN:
        raise AuthorizationError("Only the uploader or an administrator can view shares")
    return ShareDirectory().grants_for_asset(asset.id)


def shared_asset_ids(user_id: int) -> list[int]:
    return ShareDirectory().shared_asset_ids(user_id)


def is_shared_with(asset_id: int, user_id: int) -> bool:
    return ShareDirectory().has_user_grant(asset_id, user_id)
