# assetdesk/services/usage_service.py
from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import func

from ..exceptions import AuthorizationError, NotFoundError, ValidationError
from ..extensions import db
from ..models.asset import Asset
from ..models.enums import Platform
from ..models.usage import PlatformUsage
from . import audit_service
from .permissions import can_log_platform_usage
from .tx import atomic, get_user

log = logging.getLogger(__name__)


def log_platform_usage(asset_id: int, user_id: int, platform, campaign_name: str,
                       post_url: str | None = None, used_at: datetime | None = None,
                       *, ip_address=None, user_agent=None) -> PlatformUsage:
    """Record that an asset went out on a platform (post, ad, video...)."""
    try:
        platform = Platform(getattr(platform, "value", platform))
    except ValueError:
        raise ValidationError(f"Invalid platform: {platform}",
                              fields={"platform": ", ".join(p.value for p in Platform)}) from None
    if not campaign_name or not campaign_name.strip():
        raise ValidationError("Campaign name is required", fields={"campaign_name": "required"})

    with atomic():
        asset = db.session.get(Asset, asset_id)
        if asset is None:
            raise NotFoundError("Asset not found")
        user = get_user(user_id)
        if not can_log_platform_usage(user, asset):
            log.warning("usage log denied: user=%s asset=%s", user.id, asset.id)
            raise AuthorizationError("You cannot log platform usage for this asset")

        usage = PlatformUsage(
            asset_id=asset.id,
            platform=platform,
            campaign_name=campaign_name.strip(),
            post_url=(post_url or "").strip() or None,
            used_at=used_at or datetime.utcnow(),
            logged_by_id=user.id,
        )
        db.session.add(usage)
        db.session.flush()
        audit_service.log_platform_usage(user.id, asset.id, usage, ip_address=ip_address, user_agent=user_agent)

    log.info("asset %s used on %s (%s) by user=%s", asset.id, platform.value, usage.campaign_name, user.id)
    return usage


def usage_stats(asset_id: int) -> dict:
    rows = (
        db.session.query(PlatformUsage.platform, func.count(PlatformUsage.id))
        .filter(PlatformUsage.asset_id == asset_id)
        .group_by(PlatformUsage.platform)
        .all()
    )
    by_platform = {p.value: 0 for p in Platform}
    for platform, count in rows:
        by_platform[getattr(platform, "value", platform)] = count
    return {"asset_id": asset_id, "total": sum(by_platform.values()), "by_platform": by_platform}
