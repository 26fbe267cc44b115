from types import SimpleNamespace

import pytest

from assetdesk import create_app
from assetdesk.config import TestConfig
from assetdesk.extensions import db
from assetdesk.models import (
    Asset, AssetShare, AssetStatus, AssetType, Company, ShareTarget, UploadType, User, UserRole, Visibility,
)


@pytest.fixture()
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def companies(app):
    acme = Company(name="Acme")
    globex = Company(name="Globex")
    db.session.add_all([acme, globex])
    db.session.commit()
    return SimpleNamespace(acme=acme, globex=globex)


@pytest.fixture()
def users(app, companies):
    def mk(name, role, company=None):
        u = User(name=name, email=f"{name.lower()}@example.com", role=role,
                 company_id=company.id if company else None)
        db.session.add(u)
        return u

    ns = SimpleNamespace(
        admin=mk("Ada", UserRole.ADMIN, companies.acme),
        admin2=mk("Alan", UserRole.ADMIN),
        creator=mk("Cora", UserRole.CONTENT_CREATOR, companies.acme),
        creator_globex=mk("Carl", UserRole.CONTENT_CREATOR, companies.globex),
        creator_solo=mk("Cleo", UserRole.CONTENT_CREATOR),
        seo=mk("Sam", UserRole.SEO_SPECIALIST, companies.acme),
        seo_solo=mk("Sid", UserRole.SEO_SPECIALIST),
    )
    db.session.commit()
    return ns


@pytest.fixture()
def make_asset(app):
    """Insert an asset directly, bypassing the service-level defaults."""
    counter = {"n": 0}

    def _make(uploader, *, upload_type=UploadType.SEO, visibility=Visibility.ADMIN_ONLY,
              status=AssetStatus.DRAFT, company=None, allowed_role=None, title=None, **extra):
        counter["n"] += 1
        a = Asset(
            title=title or f"asset-{counter['n']}",
            asset_type=extra.pop("asset_type", AssetType.IMAGE),
            upload_type=upload_type,
            status=status,
            visibility=visibility,
            allowed_role=allowed_role,
            company_id=company.id if company else None,
            uploader_id=uploader.id,
            storage_url=f"s3://bucket/{counter['n']}",
            **extra,
        )
        db.session.add(a)
        db.session.commit()
        return a

    return _make


@pytest.fixture()
def grant(app):
    def _grant(asset, recipient, *, by=None, target_type=ShareTarget.USER, target_id=None):
        s = AssetShare(
            asset_id=asset.id,
            shared_by_id=(by or asset.uploader).id,
            shared_with_id=recipient.id,
            target_type=target_type,
            target_id=target_id,
        )
        db.session.add(s)
        db.session.commit()
        return s

    return _grant


class FakeDirectory:
    """In-memory grant lookup for the pure evaluator tests."""

    def __init__(self, user_grants=(), role_grants=()):
        self.user_grants = set(user_grants)
        self.role_grants = {(a, getattr(r, "value", r)) for a, r in role_grants}
        self.calls = 0

    def has_user_grant(self, asset_id, user_id):
        self.calls += 1
        return (asset_id, user_id) in self.user_grants

    def has_role_grant(self, asset_id, role):
        self.calls += 1
        return (asset_id, getattr(role, "value", role)) in self.role_grants


@pytest.fixture()
def fake_directory():
    return FakeDirectory
