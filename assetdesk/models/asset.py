# assetdesk/models/asset.py
from datetime import datetime
from ..extensions import db
from .enums import AssetStatus, AssetType, UploadType, UserRole, Visibility, enum_type


class Asset(db.Model):
    __tablename__ = "asset"

    id = db.Column(db.Integer, primary_key=True)

    title = db.Column(db.String(255), nullable=False, index=True)
    description = db.Column(db.Text)
    tags = db.Column(db.JSON, default=list)

    asset_type = db.Column(enum_type(AssetType), nullable=False)
    upload_type = db.Column(enum_type(UploadType), nullable=False, index=True)
    status = db.Column(enum_type(AssetStatus), nullable=False, default=AssetStatus.DRAFT, index=True)
    visibility = db.Column(enum_type(Visibility), nullable=False, default=Visibility.UPLOADER_ONLY, index=True)

    # ROLE-mode fast path; when empty the role grants in asset_share are used
    allowed_role = db.Column(enum_type(UserRole), nullable=True)

    company_id = db.Column(db.Integer, db.ForeignKey("company.id"), nullable=True, index=True)
    # owning user, never reassigned
    uploader_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)

    # storage info (bytes live in the external object store)
    storage_url = db.Column(db.String(1024), nullable=False)
    file_size = db.Column(db.Integer)
    mime_type = db.Column(db.String(120))

    target_platforms = db.Column(db.JSON, default=list)
    campaign_name = db.Column(db.String(255))

    uploaded_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    # current review outcome; history lives in Approval
    approved_at = db.Column(db.DateTime)
    approved_by_id = db.Column(db.Integer, db.ForeignKey("user.id"))
    rejected_at = db.Column(db.DateTime)
    rejected_by_id = db.Column(db.Integer, db.ForeignKey("user.id"))
    rejection_reason = db.Column(db.Text)

    uploader = db.relationship("User", foreign_keys=[uploader_id], back_populates="uploads")
    approved_by = db.relationship("User", foreign_keys=[approved_by_id])
    rejected_by = db.relationship("User", foreign_keys=[rejected_by_id])
    company = db.relationship("Company")

    shares = db.relationship(
        "AssetShare",
        back_populates="asset",
        lazy="selectin",
        cascade="all, delete-orphan",
    )
    approvals = db.relationship(
        "Approval",
        back_populates="asset",
        lazy="dynamic",
        cascade="all, delete-orphan",
        order_by="Approval.created_at",
    )
    usages = db.relationship(
        "PlatformUsage",
        back_populates="asset",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )

    # --- Convenience flags ---
    @property
    def is_seo(self) -> bool:
        return self.upload_type == UploadType.SEO

    @property
    def is_doc(self) -> bool:
        return self.upload_type == UploadType.DOC

    def mark_approved(self, reviewer_id: int, at: datetime | None = None):
        self.status = AssetStatus.APPROVED
        self.approved_at = at or datetime.utcnow()
        self.approved_by_id = reviewer_id
        self.rejected_at = None
        self.rejected_by_id = None
        self.rejection_reason = None

    def mark_rejected(self, reviewer_id: int, reason: str, at: datetime | None = None):
        self.status = AssetStatus.REJECTED
        self.rejected_at = at or datetime.utcnow()
        self.rejected_by_id = reviewer_id
        self.rejection_reason = reason
        self.approved_at = None
        self.approved_by_id = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "tags": list(self.tags or []),
            "asset_type": _value(self.asset_type),
            "upload_type": _value(self.upload_type),
            "status": _value(self.status),
            "visibility": _value(self.visibility),
            "allowed_role": _value(self.allowed_role),
            "company_id": self.company_id,
            "uploader_id": self.uploader_id,
            "storage_url": self.storage_url,
            "file_size": self.file_size,
            "mime_type": self.mime_type,
            "target_platforms": list(self.target_platforms or []),
            "campaign_name": self.campaign_name,
            "uploaded_at": self.uploaded_at.isoformat() if self.uploaded_at else None,
            "approved_at": self.approved_at.isoformat() if self.approved_at else None,
            "approved_by_id": self.approved_by_id,
            "rejected_at": self.rejected_at.isoformat() if self.rejected_at else None,
            "rejected_by_id": self.rejected_by_id,
            "rejection_reason": self.rejection_reason,
        }

    def __repr__(self):
        return f"<Asset id={self.id} type={self.upload_type} status={self.status} visibility={self.visibility}>"


def _value(member):
    return getattr(member, "value", member)
