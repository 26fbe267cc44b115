# assetdesk/services/approval_service.py
"""Review lifecycle for SEO assets.

    DRAFT -> PENDING_REVIEW -> APPROVED
                            -> REJECTED -> PENDING_REVIEW (resubmit)

Every transition runs under a row lock on the asset and commits together
with its audit rows; notifications go out afterwards.
"""
from __future__ import annotations

import logging

from ..exceptions import AuthorizationError, StateConflictError, ValidationError
from ..models.approval import Approval
from ..models.enums import ApprovalAction, AssetStatus, UploadType, UserRole, Visibility
from . import audit_service, notification_service
from .tx import atomic, get_user, lock_asset
from .visibility import parse_visibility

log = logging.getLogger(__name__)

SUBMITTABLE = frozenset({AssetStatus.DRAFT, AssetStatus.REJECTED})


def parse_role(value, field: str = "allowed_role") -> UserRole:
    try:
        return UserRole(getattr(value, "value", value))
    except ValueError:
        raise ValidationError(f"Invalid role: {value}", fields={field: "unknown role"}) from None


def resolve_visibility(visibility, allowed_role=None):
    """Parse a visibility and its role; `allowed_role` goes with ROLE and nothing else."""
    target = parse_visibility(visibility)
    if target != Visibility.ROLE:
        if allowed_role:
            raise ValidationError("A role can only be set with ROLE visibility",
                                  fields={"allowed_role": "only valid for ROLE"})
        return target, None
    if not allowed_role:
        raise ValidationError("A role is required for ROLE visibility", fields={"allowed_role": "required"})
    return target, parse_role(allowed_role)


def _check_reviewer(reviewer, asset, verb: str):
    if reviewer.role != UserRole.ADMIN or asset.upload_type != UploadType.SEO:
        log.warning("%s denied: user=%s asset=%s", verb, reviewer.id, asset.id)
        raise AuthorizationError(f"Only administrators can {verb} SEO assets")
    if asset.status != AssetStatus.PENDING_REVIEW:
        raise StateConflictError(
            f"Asset must be in PENDING_REVIEW status to {verb}. Current status: {asset.status.value}"
        )


def submit_for_review(asset_id: int, actor_id: int, *, ip_address=None, user_agent=None):
    with atomic():
        asset = lock_asset(asset_id)
        actor = get_user(actor_id)
        if actor.id != asset.uploader_id:
            log.warning("submit denied: user=%s asset=%s", actor.id, asset.id)
            raise AuthorizationError("Only the uploader can submit this asset for review")
        if asset.upload_type != UploadType.SEO:
            raise AuthorizationError("Only SEO assets go through review")
        if asset.status not in SUBMITTABLE:
            raise StateConflictError(
                f"Asset must be in DRAFT or REJECTED status to submit. Current status: {asset.status.value}"
            )

        previous = asset.status
        asset.status = AssetStatus.PENDING_REVIEW
        audit_service.log_asset_update(actor.id, asset.id, {
            "status": {"from": previous, "to": AssetStatus.PENDING_REVIEW},
        }, ip_address=ip_address, user_agent=user_agent)

    log.info("asset %s submitted for review by user=%s", asset.id, actor.id)
    notification_service.notify_admins_of_upload(asset, actor.name)
    return asset


def approve_asset(asset_id: int, reviewer_id: int, new_visibility=None, allowed_role=None,
                  *, ip_address=None, user_agent=None):
    if new_visibility is not None:
        target, role = resolve_visibility(new_visibility, allowed_role)
    elif allowed_role:
        raise ValidationError("A role can only be set with ROLE visibility",
                              fields={"allowed_role": "only valid for ROLE"})

    with atomic():
        asset = lock_asset(asset_id)
        reviewer = get_user(reviewer_id, "Reviewer")
        _check_reviewer(reviewer, asset, "approve")

        old_visibility = asset.visibility
        if new_visibility is not None:
            asset.visibility = target
            asset.allowed_role = role

        previous = asset.status
        asset.mark_approved(reviewer.id)
        asset.approvals.append(Approval(reviewer_id=reviewer.id, action=ApprovalAction.APPROVE))

        ctx = dict(ip_address=ip_address, user_agent=user_agent)
        audit_service.log_asset_approve(reviewer.id, asset.id, previous, **ctx)
        if asset.visibility != old_visibility:
            audit_service.log_visibility_change(reviewer.id, asset.id, old_visibility, asset.visibility,
                                                {"reason": "approval"}, **ctx)

    log.info("asset %s approved by user=%s visibility=%s", asset.id, reviewer.id, asset.visibility.value)
    notification_service.notify_uploader_of_decision(asset, reviewer.name, approved=True)
    return asset


def reject_asset(asset_id: int, reviewer_id: int, reason: str, *, ip_address=None, user_agent=None):
    if not reason or not reason.strip():
        raise ValidationError("Rejection reason is required", fields={"reason": "required"})
    reason = reason.strip()

    with atomic():
        asset = lock_asset(asset_id)
        reviewer = get_user(reviewer_id, "Reviewer")
        _check_reviewer(reviewer, asset, "reject")

        previous = asset.status
        asset.mark_rejected(reviewer.id, reason)
        asset.approvals.append(Approval(reviewer_id=reviewer.id, action=ApprovalAction.REJECT, reason=reason))
        audit_service.log_asset_reject(reviewer.id, asset.id, previous, reason,
                                       ip_address=ip_address, user_agent=user_agent)

    log.info("asset %s rejected by user=%s", asset.id, reviewer.id)
    notification_service.notify_uploader_of_decision(asset, reviewer.name, approved=False, reason=reason)
    return asset


def approval_history(asset_id: int) -> list[Approval]:
    return (
        Approval.query
        .filter_by(asset_id=asset_id)
        .order_by(Approval.created_at, Approval.id)
        .all()
    )
