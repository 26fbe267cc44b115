# assetdesk/models/usage.py
from datetime import datetime
from ..extensions import db
from .enums import Platform, enum_type


class PlatformUsage(db.Model):
    __tablename__ = "platform_usage"

    id = db.Column(db.Integer, primary_key=True)
    asset_id = db.Column(db.Integer, db.ForeignKey("asset.id", ondelete="CASCADE"), nullable=False, index=True)
    platform = db.Column(enum_type(Platform, length=16), nullable=False, index=True)
    campaign_name = db.Column(db.String(255), nullable=False)
    post_url = db.Column(db.String(1024))
    used_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    logged_by_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)

    asset = db.relationship("Asset", back_populates="usages")
    logged_by = db.relationship("User", foreign_keys=[logged_by_id])
