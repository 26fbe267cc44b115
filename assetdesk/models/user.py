# assetdesk/models/user.py
from datetime import datetime
from flask_login import UserMixin
from ..extensions import db
from .enums import UserRole, enum_type


class User(UserMixin, db.Model):
    __tablename__ = "user"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)

    # ADMIN|CONTENT_CREATOR|SEO_SPECIALIST
    role = db.Column(enum_type(UserRole), nullable=False, default=UserRole.CONTENT_CREATOR, index=True)

    # tenant; None means the user belongs to no company
    company_id = db.Column(db.Integer, db.ForeignKey("company.id"), nullable=True, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    company = db.relationship("Company", back_populates="users")

    uploads = db.relationship(
        "Asset",
        foreign_keys="Asset.uploader_id",
        back_populates="uploader",
        lazy="dynamic",
    )

    # --- Convenience flags ---
    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self):
        return f"<User id={self.id} role={self.role} company_id={self.company_id}>"
