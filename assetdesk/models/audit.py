# assetdesk/models/audit.py
from datetime import datetime
from sqlalchemy import event
from ..extensions import db
from .enums import AuditAction, ResourceType, enum_type


class AuditLog(db.Model):
    __tablename__ = "audit_log"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    action = db.Column(enum_type(AuditAction), nullable=False, index=True)
    resource_type = db.Column(enum_type(ResourceType), nullable=False)
    resource_id = db.Column(db.String(64), nullable=False, index=True)

    # no FK: the trail must outlive a deleted asset
    asset_id = db.Column(db.Integer, nullable=True, index=True)

    # `metadata` is reserved on declarative models
    meta = db.Column("metadata", db.JSON, nullable=False, default=dict)
    ip_address = db.Column(db.String(45))
    user_agent = db.Column(db.String(300))
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog {self.action} {self.resource_type}:{self.resource_id} by={self.user_id}>"


class AuditLogImmutableError(RuntimeError):
    pass


@event.listens_for(AuditLog, "before_update")
def _refuse_update(mapper, connection, target):
    raise AuditLogImmutableError(f"audit log {target.id} is immutable")


@event.listens_for(AuditLog, "before_delete")
def _refuse_delete(mapper, connection, target):
    raise AuditLogImmutableError(f"audit log {target.id} cannot be deleted")
