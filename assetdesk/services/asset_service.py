# assetdesk/services/asset_service.py
"""Asset CRUD wrapped around the authorization checks.

Upload types branch early:
  - SEO: company-bound marketing content; non-admin uploads start ADMIN_ONLY
    and go through review.
  - DOC: personal documents; always UPLOADER_ONLY/DRAFT, no company, and
    widened only through sharing.
"""
from __future__ import annotations

import logging

from flask import current_app

from ..exceptions import AuthorizationError, NotFoundError, ValidationError
from ..extensions import db
from ..models.asset import Asset
from ..models.company import Company
from ..models.enums import AssetStatus, AssetType, UploadType, UserRole, Visibility
from . import audit_service, notification_service
from .approval_service import resolve_visibility
from .permissions import can_delete, can_edit, can_modify_visibility
from .tx import atomic, get_user, lock_asset
from .visibility import can_view, parse_visibility

log = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "description", "tags", "target_platforms", "campaign_name")


def _parse(enum_cls, value, field):
    if value is None or value == "":
        raise ValidationError(f"{field} is required", fields={field: "required"})
    try:
        return enum_cls(getattr(value, "value", value))
    except ValueError:
        raise ValidationError(f"Invalid {field}: {value}", fields={field: "invalid value"}) from None


def _clean_tags(tags) -> list[str]:
    out = []
    for t in tags or []:
        t = str(t).strip()
        if t and t not in out:
            out.append(t)
    return out


def _validate_metadata(title, description, tags):
    errors = {}
    if title is not None and not str(title).strip():
        errors["title"] = "required"
    desc_max = current_app.config.get("ASSET_DESCRIPTION_MAX", 1000)
    if description and len(description) > desc_max:
        errors["description"] = f"at most {desc_max} characters"
    tags_max = current_app.config.get("ASSET_TAGS_MAX", 20)
    if tags is not None and len(tags) > tags_max:
        errors["tags"] = f"at most {tags_max} tags"
    if errors:
        raise ValidationError("Invalid asset metadata", fields=errors)


def create_asset(uploader_id: int, title: str, asset_type, upload_type, *,
                 storage_url: str | None = None, url: str | None = None,
                 description: str | None = None, tags=None, company_id: int | None = None,
                 file_size: int | None = None, mime_type: str | None = None,
                 target_platforms=None, campaign_name: str | None = None,
                 submit_for_review: bool = False, visibility=None,
                 ip_address=None, user_agent=None) -> Asset:
    if title is None:
        raise ValidationError("Title is required", fields={"title": "required"})
    asset_type = _parse(AssetType, asset_type, "asset_type")
    upload_type = _parse(UploadType, upload_type, "upload_type")
    tags = _clean_tags(tags)
    _validate_metadata(title, description, tags)

    if asset_type == AssetType.LINK:
        if not url or not url.strip():
            raise ValidationError("URL is required for link assets", fields={"url": "required"})
        storage_url = url.strip()
    if not storage_url:
        raise ValidationError("Storage location is required", fields={"storage_url": "required"})

    uploader = get_user(uploader_id, "Uploader")

    if upload_type == UploadType.SEO:
        if not company_id:
            raise ValidationError("Company is required for SEO uploads", fields={"company_id": "required"})
        if db.session.get(Company, company_id) is None:
            raise NotFoundError("Company not found", fields={"company_id": company_id})
        if uploader.role == UserRole.ADMIN:
            vis = parse_visibility(visibility) if visibility else Visibility.ADMIN_ONLY
        else:
            vis = Visibility.ADMIN_ONLY
        status = AssetStatus.PENDING_REVIEW if submit_for_review else AssetStatus.DRAFT
    else:
        if company_id:
            raise ValidationError("Doc uploads cannot be tied to a company", fields={"company_id": "not allowed"})
        vis = Visibility.UPLOADER_ONLY
        status = AssetStatus.DRAFT

    with atomic():
        asset = Asset(
            title=title.strip(),
            description=description,
            tags=tags,
            asset_type=asset_type,
            upload_type=upload_type,
            status=status,
            visibility=vis,
            company_id=company_id if upload_type == UploadType.SEO else None,
            uploader_id=uploader.id,
            storage_url=storage_url,
            file_size=file_size,
            mime_type=mime_type,
            target_platforms=list(target_platforms or []),
            campaign_name=campaign_name,
        )
        db.session.add(asset)
        db.session.flush()
        audit_service.log_asset_create(uploader.id, asset, ip_address=ip_address, user_agent=user_agent)

    log.info("asset %s created by user=%s (%s, %s, %s)",
             asset.id, uploader.id, upload_type.value, vis.value, status.value)
    if status == AssetStatus.PENDING_REVIEW:
        notification_service.notify_admins_of_upload(asset, uploader.name)
    return asset


def get_asset_for(asset_id: int, user_id: int) -> Asset:
    asset = db.session.get(Asset, asset_id)
    if asset is None:
        raise NotFoundError("Asset not found")
    user = get_user(user_id)
    if not can_view(user, asset):
        raise AuthorizationError("You do not have permission to view this asset")
    return asset


def update_asset(asset_id: int, user_id: int, *, ip_address=None, user_agent=None, **fields) -> Asset:
    unknown = sorted(set(fields) - set(EDITABLE_FIELDS))
    if unknown:
        raise ValidationError("Unknown or read-only fields", fields={k: "not editable" for k in unknown})
    if "tags" in fields:
        fields["tags"] = _clean_tags(fields["tags"])
    if "target_platforms" in fields:
        fields["target_platforms"] = list(fields["target_platforms"] or [])
    _validate_metadata(fields.get("title"), fields.get("description"), fields.get("tags"))
    if "title" in fields:
        if fields["title"] is None:
            raise ValidationError("Title is required", fields={"title": "required"})
        fields["title"] = fields["title"].strip()

    with atomic():
        asset = lock_asset(asset_id)
        user = get_user(user_id)
        if not can_edit(user, asset):
            log.warning("edit denied: user=%s asset=%s", user.id, asset.id)
            raise AuthorizationError("You do not have permission to edit this asset")

        changes = {}
        for key, value in fields.items():
            old = getattr(asset, key)
            if old != value:
                changes[key] = {"from": old, "to": value}
                setattr(asset, key, value)
        if changes:
            audit_service.log_asset_update(user.id, asset.id, changes,
                                           ip_address=ip_address, user_agent=user_agent)

    if changes:
        log.info("asset %s updated by user=%s: %s", asset.id, user.id, ", ".join(changes))
    return asset


def delete_asset(asset_id: int, user_id: int, *, ip_address=None, user_agent=None) -> None:
    with atomic():
        asset = lock_asset(asset_id)
        user = get_user(user_id)
        if not can_delete(user, asset):
            log.warning("delete denied: user=%s asset=%s", user.id, asset.id)
            raise AuthorizationError("You do not have permission to delete this asset")
        audit_service.log_asset_delete(user.id, asset, ip_address=ip_address, user_agent=user_agent)
        db.session.delete(asset)

    log.info("asset %s deleted by user=%s", asset_id, user_id)


def change_visibility(asset_id: int, user_id: int, visibility, allowed_role=None,
                      *, ip_address=None, user_agent=None) -> Asset:
    target, role = resolve_visibility(visibility, allowed_role)

    with atomic():
        asset = lock_asset(asset_id)
        user = get_user(user_id)
        if not can_modify_visibility(user, asset):
            log.warning("visibility change denied: user=%s asset=%s", user.id, asset.id)
            raise AuthorizationError("Only administrators can change the visibility of SEO assets")

        old, old_role = asset.visibility, asset.allowed_role
        asset.visibility = target
        asset.allowed_role = role
        if old != target or old_role != role:
            audit_service.log_visibility_change(user.id, asset.id, old, target, {
                "old_allowed_role": old_role,
                "new_allowed_role": role,
            }, ip_address=ip_address, user_agent=user_agent)

    log.info("asset %s visibility %s -> %s by user=%s", asset.id, old.value, target.value, user.id)
    return asset
