from types import SimpleNamespace

import pytest

from assetdesk.exceptions import ValidationError
from assetdesk.models.enums import AssetStatus, UploadType, UserRole, Visibility
from assetdesk.services.visibility import (
    EVALUATORS, all_visibility_levels, can_view, is_valid_visibility, parse_visibility,
)


def user(id, role=UserRole.CONTENT_CREATOR, company_id=None):
    return SimpleNamespace(id=id, role=role, company_id=company_id)


def asset(visibility, *, id=100, uploader_id=1, upload_type=UploadType.DOC,
          company_id=None, allowed_role=None, status=AssetStatus.APPROVED):
    return SimpleNamespace(id=id, uploader_id=uploader_id, visibility=visibility, upload_type=upload_type,
                           company_id=company_id, allowed_role=allowed_role, status=status)


OWNER = user(1)
STRANGER = user(2)
ADMIN = user(3, UserRole.ADMIN)
SEO = user(4, UserRole.SEO_SPECIALIST)


def test_every_visibility_has_an_evaluator():
    assert set(EVALUATORS) == set(Visibility)
    assert sorted(all_visibility_levels()) == sorted(v.value for v in Visibility)
    assert len(all_visibility_levels()) == 7


@pytest.mark.parametrize("value,ok", [
    ("PUBLIC", True), ("SELECTED_USERS", True), (Visibility.TEAM, True),
    ("public", False), ("EVERYONE", False), ("", False),
])
def test_is_valid_visibility(value, ok):
    assert is_valid_visibility(value) is ok


def test_parse_visibility_rejects_unknown_values():
    assert parse_visibility("COMPANY") is Visibility.COMPANY
    with pytest.raises(ValidationError) as exc:
        parse_visibility("EVERYONE")
    assert "visibility" in exc.value.fields
    with pytest.raises(ValidationError):
        parse_visibility(None)


def test_public_allows_everyone(fake_directory):
    d = fake_directory()
    a = asset(Visibility.PUBLIC)
    assert all(can_view(u, a, d) for u in (OWNER, STRANGER, ADMIN, SEO))


def test_uploader_only(fake_directory):
    a = asset(Visibility.UPLOADER_ONLY)
    assert can_view(OWNER, a, fake_directory())
    assert not can_view(STRANGER, a, fake_directory())
    assert can_view(STRANGER, a, fake_directory(user_grants=[(a.id, STRANGER.id)]))


def test_uploader_only_ignores_role_grants(fake_directory):
    a = asset(Visibility.UPLOADER_ONLY)
    d = fake_directory(role_grants=[(a.id, UserRole.CONTENT_CREATOR)])
    assert not can_view(STRANGER, a, d)


def test_admin_only(fake_directory):
    a = asset(Visibility.ADMIN_ONLY, upload_type=UploadType.SEO)
    d = fake_directory()
    assert can_view(ADMIN, a, d)
    assert can_view(OWNER, a, d)
    assert not can_view(STRANGER, a, d)
    assert not can_view(SEO, a, d)


def test_company_requires_company_on_both_sides(fake_directory):
    d = fake_directory()
    a = asset(Visibility.COMPANY, upload_type=UploadType.SEO, company_id=10)
    assert can_view(user(5, company_id=10), a, d)
    assert not can_view(user(6, company_id=11), a, d)
    assert not can_view(user(7), a, d)

    no_company = asset(Visibility.COMPANY, upload_type=UploadType.SEO, company_id=None)
    assert not can_view(user(8), no_company, d)
    assert not can_view(user(9, company_id=10), no_company, d)


def test_team_always_denies(fake_directory):
    a = asset(Visibility.TEAM)
    d = fake_directory(user_grants=[(a.id, STRANGER.id)], role_grants=[(a.id, UserRole.CONTENT_CREATOR)])
    for u in (STRANGER, SEO, user(10, company_id=1)):
        assert not can_view(u, a, d)


def test_role_prefers_allowed_role(fake_directory):
    a = asset(Visibility.ROLE, upload_type=UploadType.SEO, allowed_role=UserRole.SEO_SPECIALIST)
    # a role grant for another role does not widen the fast path
    d = fake_directory(role_grants=[(a.id, UserRole.CONTENT_CREATOR)])
    assert can_view(SEO, a, d)
    assert not can_view(STRANGER, a, d)
    assert d.calls == 0


def test_role_falls_back_to_role_grants(fake_directory):
    a = asset(Visibility.ROLE, upload_type=UploadType.SEO)
    d = fake_directory(role_grants=[(a.id, UserRole.SEO_SPECIALIST)])
    assert can_view(SEO, a, d)
    assert not can_view(STRANGER, a, d)


def test_selected_users_needs_a_user_grant(fake_directory):
    a = asset(Visibility.SELECTED_USERS)
    d = fake_directory(user_grants=[(a.id, SEO.id)])
    assert can_view(SEO, a, d)
    assert not can_view(STRANGER, a, d)


@pytest.mark.parametrize("mode", list(Visibility))
def test_uploader_always_sees_own_asset(mode, fake_directory):
    assert can_view(OWNER, asset(mode, company_id=None), fake_directory())


@pytest.mark.parametrize("mode", list(Visibility))
def test_admin_sees_every_seo_asset(mode, fake_directory):
    a = asset(mode, upload_type=UploadType.SEO, company_id=99)
    assert can_view(ADMIN, a, fake_directory())


def test_admin_has_no_blanket_doc_access(fake_directory):
    private = asset(Visibility.UPLOADER_ONLY)
    shared = asset(Visibility.SELECTED_USERS, id=101)
    d = fake_directory(user_grants=[(shared.id, ADMIN.id)])
    assert not can_view(ADMIN, private, d)
    assert can_view(ADMIN, shared, d)


def test_accepts_plain_string_modes(fake_directory):
    a = asset("PUBLIC")
    assert can_view(STRANGER, a, fake_directory())
