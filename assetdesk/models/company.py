# assetdesk/models/company.py
from datetime import datetime
from ..extensions import db


class Company(db.Model):
    __tablename__ = "company"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), unique=True, nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    users = db.relationship("User", back_populates="company", lazy="dynamic")

    def __repr__(self):
        return f"<Company id={self.id} name={self.name!r}>"
