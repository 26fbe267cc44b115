# assetdesk/models/share.py
from datetime import datetime
from ..extensions import db
from .enums import ShareTarget, enum_type


class AssetShare(db.Model):
    """One explicit grant on an asset.

    USER grants name the recipient in ``shared_with_id``. ROLE grants carry the
    role name in ``target_id`` and only matter for ROLE-mode assets.
    """
    __tablename__ = "asset_share"

    id = db.Column(db.Integer, primary_key=True)
    asset_id = db.Column(db.Integer, db.ForeignKey("asset.id", ondelete="CASCADE"), nullable=False, index=True)
    shared_by_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)
    shared_with_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)

    target_type = db.Column(enum_type(ShareTarget, length=10), nullable=False, default=ShareTarget.USER, index=True)
    target_id = db.Column(db.String(64), nullable=True, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    asset = db.relationship("Asset", back_populates="shares")
    shared_by = db.relationship("User", foreign_keys=[shared_by_id])
    shared_with = db.relationship("User", foreign_keys=[shared_with_id])

    __table_args__ = (
        db.UniqueConstraint("asset_id", "shared_with_id", name="uq_asset_share_asset_recipient"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "asset_id": self.asset_id,
            "shared_by_id": self.shared_by_id,
            "shared_with_id": self.shared_with_id,
            "target_type": getattr(self.target_type, "value", self.target_type),
            "target_id": self.target_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<AssetShare asset={self.asset_id} with={self.shared_with_id} type={self.target_type}>"
