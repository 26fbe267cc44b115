# assetdesk/services/audit_service.py
"""Append-only audit trail.

Helpers only ``db.session.add`` the row; the caller's commit makes the
audit entry atomic with the change it describes.
"""
from __future__ import annotations

import logging

from ..extensions import db
from ..models.audit import AuditLog
from ..models.enums import AuditAction, ResourceType

log = logging.getLogger(__name__)


def _jsonable(value):
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(v) for v in value]
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return getattr(value, "value", value)


def record(*, user_id: int, action: AuditAction, resource_type: ResourceType = ResourceType.ASSET,
           resource_id, asset_id: int | None = None, metadata: dict | None = None,
           ip_address: str | None = None, user_agent: str | None = None) -> AuditLog:
    entry = AuditLog(
        user_id=user_id,
        action=action,
        resource_type=resource_type,
        resource_id=str(resource_id),
        asset_id=asset_id,
        meta=_jsonable(metadata or {}),
        ip_address=ip_address,
        user_agent=(user_agent or None) and user_agent[:300],
    )
    db.session.add(entry)
    log.debug("audit %s %s:%s by user=%s", action.value, resource_type.value, resource_id, user_id)
    return entry


def _asset_event(action, user_id, asset_id, metadata=None, **ctx) -> AuditLog:
    return record(user_id=user_id, action=action, resource_type=ResourceType.ASSET,
                  resource_id=asset_id, asset_id=asset_id, metadata=metadata, **ctx)


def log_asset_create(user_id, asset, **ctx):
    return _asset_event(AuditAction.CREATE, user_id, asset.id, {
        "title": asset.title,
        "upload_type": asset.upload_type,
        "asset_type": asset.asset_type,
        "visibility": asset.visibility,
        "status": asset.status,
    }, **ctx)


def log_asset_update(user_id, asset_id, changes: dict, **ctx):
    return _asset_event(AuditAction.UPDATE, user_id, asset_id, changes, **ctx)


def log_asset_delete(user_id, asset, **ctx):
    return _asset_event(AuditAction.DELETE, user_id, asset.id, {
        "title": asset.title,
        "upload_type": asset.upload_type,
    }, **ctx)


def log_asset_approve(user_id, asset_id, previous_status, **ctx):
    return _asset_event(AuditAction.APPROVE, user_id, asset_id, {
        "previous_status": previous_status,
        "new_status": "APPROVED",
    }, **ctx)


def log_asset_reject(user_id, asset_id, previous_status, reason: str, **ctx):
    return _asset_event(AuditAction.REJECT, user_id, asset_id, {
        "previous_status": previous_status,
        "new_status": "REJECTED",
        "reason": reason,
    }, **ctx)


def log_visibility_change(user_id, asset_id, old, new, extra: dict | None = None, **ctx):
    meta = {"old_visibility": old, "new_visibility": new}
    meta.update(extra or {})
    return _asset_event(AuditAction.VISIBILITY_CHANGE, user_id, asset_id, meta, **ctx)


def log_asset_share(user_id, asset_id, metadata: dict, **ctx):
    return _asset_event(AuditAction.SHARE, user_id, asset_id, metadata, **ctx)


def log_platform_usage(user_id, asset_id, usage, **ctx):
    return _asset_event(AuditAction.CREATE, user_id, asset_id, {
        "operation": "platform_usage",
        "platform": usage.platform,
        "campaign_name": usage.campaign_name,
        "post_url": usage.post_url,
    }, **ctx)


def trail_for_asset(asset_id: int) -> list[AuditLog]:
    return (
        AuditLog.query
        .filter_by(asset_id=asset_id)
        .order_by(AuditLog.created_at, AuditLog.id)
        .all()
    )
