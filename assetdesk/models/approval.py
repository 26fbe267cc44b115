# assetdesk/models/approval.py
from datetime import datetime
from ..extensions import db
from .enums import ApprovalAction, enum_type


class Approval(db.Model):
    # append-only; one row per approve/reject action
    __tablename__ = "approval"

    id = db.Column(db.Integer, primary_key=True)
    asset_id = db.Column(db.Integer, db.ForeignKey("asset.id", ondelete="CASCADE"), nullable=False, index=True)
    reviewer_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    action = db.Column(enum_type(ApprovalAction, length=10), nullable=False)
    reason = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    asset = db.relationship("Asset", back_populates="approvals")
    reviewer = db.relationship("User", foreign_keys=[reviewer_id])

    def __repr__(self):
        return f"<Approval asset={self.asset_id} action={self.action} by={self.reviewer_id}>"
