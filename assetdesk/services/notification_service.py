# assetdesk/services/notification_service.py
"""In-app notifications (plus optional email).

Called after the owning operation has committed. Delivery failures are
logged here and never reach the caller, so a lost notification can't undo
an approval or a share.
"""
from __future__ import annotations

import logging
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..exceptions import AuthorizationError, NotFoundError
from ..extensions import db
from ..models.asset import Asset
from ..models.enums import NotificationType, ResourceType, UserRole
from ..models.notification import Notification
from ..models.user import User
from .email_service import send_email

log = logging.getLogger(__name__)

TITLES = {
    NotificationType.ASSET_UPLOADED: "New Asset Pending Review",
    NotificationType.ASSET_APPROVED: "Asset Approved",
    NotificationType.ASSET_REJECTED: "Asset Rejected",
    NotificationType.ASSET_SHARED: "Asset Shared With You",
}


def _message(kind, actor, title, reason=None) -> str:
    if kind == NotificationType.ASSET_UPLOADED:
        return f'{actor or "A user"} submitted "{title}" for review.'
    if kind == NotificationType.ASSET_APPROVED:
        return f'{actor or "An admin"} approved your asset "{title}".'
    if kind == NotificationType.ASSET_REJECTED:
        return f'{actor or "An admin"} rejected your asset "{title}". Reason: {reason}'
    if kind == NotificationType.ASSET_SHARED:
        return f'{actor or "A user"} shared "{title}" with you'
    return f'Update on "{title}".'


def notify(recipient_id: int, kind: NotificationType, asset_id: int, actor_name: str | None,
           *, asset_title: str | None = None, reason: str | None = None) -> Notification | None:
    try:
        if asset_title is None:
            asset = db.session.get(Asset, asset_id)
            asset_title = asset.title if asset else f"#{asset_id}"

        n = Notification(
            user_id=recipient_id,
            type=kind,
            title=TITLES.get(kind, "Notification"),
            message=_message(kind, actor_name, asset_title, reason),
            related_resource_type=ResourceType.ASSET,
            related_resource_id=str(asset_id),
        )
        db.session.add(n)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        log.exception("notify failed (user=%s kind=%s asset=%s): %s", recipient_id, kind, asset_id, e)
        return None

    if current_app.config.get("NOTIFY_BY_EMAIL"):
        recipient = db.session.get(User, recipient_id)
        if recipient and recipient.email:
            send_email(to=recipient.email, subject=n.title, body=n.message)
    return n


def notify_admins_of_upload(asset, uploader_name: str | None) -> list[Notification]:
    admin_ids = [row.id for row in db.session.query(User.id).filter(User.role == UserRole.ADMIN).all()]
    out = []
    for admin_id in admin_ids:
        n = notify(admin_id, NotificationType.ASSET_UPLOADED, asset.id, uploader_name, asset_title=asset.title)
        if n is not None:
            out.append(n)
    return out


def notify_uploader_of_decision(asset, reviewer_name: str | None, approved: bool,
                                reason: str | None = None) -> Notification | None:
    kind = NotificationType.ASSET_APPROVED if approved else NotificationType.ASSET_REJECTED
    return notify(asset.uploader_id, kind, asset.id, reviewer_name, asset_title=asset.title, reason=reason)


def notify_share_recipient(asset, recipient_id: int, sharer_name: str | None) -> Notification | None:
    return notify(recipient_id, NotificationType.ASSET_SHARED, asset.id, sharer_name, asset_title=asset.title)


def unread_for(user_id: int, limit: int = 50) -> list[Notification]:
    return (
        Notification.query
        .filter_by(user_id=user_id, is_read=False)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit)
        .all()
    )


def mark_read(notification_id: int, user_id: int) -> Notification:
    n = db.session.get(Notification, notification_id)
    if n is None:
        raise NotFoundError("Notification not found")
    if n.user_id != user_id:
        raise AuthorizationError("You can only mark your own notifications as read")
    n.mark_read()
    db.session.commit()
    return n


def mark_all_read(user_id: int) -> int:
    now = datetime.utcnow()
    count = (
        Notification.query
        .filter_by(user_id=user_id, is_read=False)
        .update({"is_read": True, "read_at": now}, synchronize_session=False)
    )
    db.session.commit()
    return count
