import itertools

import pytest

from assetdesk.exceptions import AuthorizationError, ValidationError
from assetdesk.models import Asset, AssetStatus, ShareTarget, UploadType, UserRole, Visibility
from assetdesk.services.list_filter import (
    assets_by_ids, can_list, filter_assets_by_role, pending_review_assets, search_assets,
    visible_assets_query,
)


@pytest.fixture()
def catalogue(users, companies, make_asset, grant):
    """A spread of assets across every mode, status, uploader and company shape."""
    assets = []
    uploaders = [users.creator, users.seo, users.admin]
    combos = itertools.product(
        uploaders,
        list(Visibility),
        list(AssetStatus),
        [companies.acme, None],
    )
    for i, (uploader, vis, status, company) in enumerate(combos):
        allowed = UserRole.SEO_SPECIALIST if vis == Visibility.ROLE and i % 2 else None
        assets.append(make_asset(uploader, visibility=vis, status=status, company=company, allowed_role=allowed))

    for uploader, vis in itertools.product(uploaders, [Visibility.UPLOADER_ONLY, Visibility.SELECTED_USERS]):
        for status in (AssetStatus.DRAFT, AssetStatus.APPROVED):
            assets.append(make_asset(uploader, upload_type=UploadType.DOC, visibility=vis, status=status))

    for i, a in enumerate(assets):
        if i % 3 == 0 and a.uploader_id != users.seo.id:
            grant(a, users.seo)
        if i % 5 == 0 and a.uploader_id != users.admin.id:
            grant(a, users.admin)
        if i % 4 == 1 and a.uploader_id != users.creator_solo.id:
            grant(a, users.creator_solo, target_type=ShareTarget.ROLE, target_id=UserRole.CONTENT_CREATOR.value)
        if i % 7 == 2 and a.uploader_id != users.seo_solo.id:
            grant(a, users.seo_solo, target_type=ShareTarget.ROLE, target_id=UserRole.SEO_SPECIALIST.value)
    return assets


def test_bulk_query_matches_single_item_check(users, catalogue):
    everyone = [users.admin, users.admin2, users.creator, users.creator_globex,
                users.creator_solo, users.seo, users.seo_solo]
    for u in everyone:
        from_query = {a.id for a in visible_assets_query(u).all()}
        from_check = {a.id for a in catalogue if can_list(u, a)}
        assert from_query == from_check, f"divergence for {u!r}"


def test_row_pass_keeps_everything_the_query_returns(users, catalogue):
    for u in (users.creator, users.seo, users.admin2):
        rows = visible_assets_query(u).all()
        assert filter_assets_by_role(u, rows) == rows


def test_creator_listing(users, companies, make_asset, grant):
    own_draft = make_asset(users.creator, status=AssetStatus.DRAFT)
    public = make_asset(users.seo, visibility=Visibility.PUBLIC, status=AssetStatus.DRAFT)
    acme = make_asset(users.admin, visibility=Visibility.COMPANY, company=companies.acme)
    globex = make_asset(users.admin, visibility=Visibility.COMPANY, company=companies.globex)
    shared = make_asset(users.seo, upload_type=UploadType.DOC, visibility=Visibility.SELECTED_USERS)
    grant(shared, users.creator)
    private = make_asset(users.seo, upload_type=UploadType.DOC, visibility=Visibility.UPLOADER_ONLY)

    ids = {a.id for a in visible_assets_query(users.creator)}
    assert {own_draft.id, public.id, acme.id, shared.id} <= ids
    assert globex.id not in ids
    assert private.id not in ids


def test_seo_specialist_only_sees_approved_work_of_others(users, make_asset):
    own_draft = make_asset(users.seo, status=AssetStatus.DRAFT)
    others_draft = make_asset(users.creator, visibility=Visibility.PUBLIC, status=AssetStatus.DRAFT)
    others_approved = make_asset(users.creator, visibility=Visibility.PUBLIC, status=AssetStatus.APPROVED)
    role_approved = make_asset(users.creator, visibility=Visibility.ROLE, status=AssetStatus.APPROVED,
                               allowed_role=UserRole.SEO_SPECIALIST)

    ids = {a.id for a in visible_assets_query(users.seo)}
    assert {own_draft.id, others_approved.id, role_approved.id} <= ids
    assert others_draft.id not in ids


def test_admin_sees_all_seo_but_not_private_docs(users, make_asset, grant):
    seo_assets = [make_asset(users.creator, visibility=v, status=s)
                  for v in (Visibility.UPLOADER_ONLY, Visibility.TEAM, Visibility.COMPANY)
                  for s in (AssetStatus.DRAFT, AssetStatus.REJECTED)]
    private_doc = make_asset(users.creator, upload_type=UploadType.DOC, visibility=Visibility.UPLOADER_ONLY)
    shared_doc = make_asset(users.creator, upload_type=UploadType.DOC, visibility=Visibility.SELECTED_USERS)
    grant(shared_doc, users.admin)
    own_doc = make_asset(users.admin, upload_type=UploadType.DOC, visibility=Visibility.UPLOADER_ONLY)

    ids = {a.id for a in visible_assets_query(users.admin)}
    assert {a.id for a in seo_assets} <= ids
    assert {shared_doc.id, own_doc.id} <= ids
    assert private_doc.id not in ids


def test_search_paginates_and_sorts(app, users, make_asset):
    for n in range(7):
        make_asset(users.creator, visibility=Visibility.PUBLIC, title=f"Banner {n}")
    make_asset(users.creator, visibility=Visibility.PUBLIC, title="Logo")

    page = search_assets(users.creator_solo, query="banner", sort_by="title", sort_order="asc", page=2, limit=3)
    assert page.total == 7
    assert page.total_pages == 3
    assert page.page == 2 and page.limit == 3
    assert [a.title for a in page.assets] == ["Banner 3", "Banner 4", "Banner 5"]
    assert page.to_dict()["assets"][0]["title"] == "Banner 3"


def test_search_respects_visibility(users, make_asset):
    make_asset(users.creator, visibility=Visibility.PUBLIC, title="Shared poster")
    make_asset(users.creator, visibility=Visibility.ADMIN_ONLY, title="Hidden poster")
    titles = [a.title for a in search_assets(users.creator_solo, query="poster").assets]
    assert titles == ["Shared poster"]


def test_search_filters(users, companies, make_asset):
    make_asset(users.creator, visibility=Visibility.PUBLIC, status=AssetStatus.APPROVED,
               company=companies.acme, tags=["Summer", "promo"])
    make_asset(users.creator, visibility=Visibility.PUBLIC, status=AssetStatus.DRAFT, tags=["winter"])

    approved = search_assets(users.creator_solo, status="APPROVED")
    assert [a.status for a in approved.assets] == [AssetStatus.APPROVED]
    assert search_assets(users.creator_solo, company_id=companies.acme.id).total == 1
    assert len(search_assets(users.creator_solo, tags=["summer"]).assets) == 1
    assert search_assets(users.creator_solo, uploader_role=UserRole.SEO_SPECIALIST).total == 0


def test_search_limit_defaults_and_cap(app, users):
    assert search_assets(users.creator).limit == app.config["SEARCH_PAGE_SIZE"]
    assert search_assets(users.creator, limit=10_000).limit == app.config["SEARCH_MAX_PAGE_SIZE"]


@pytest.mark.parametrize("kwargs", [
    {"sort_by": "password"},
    {"sort_order": "sideways"},
    {"status": "ARCHIVED"},
    {"visibility": "EVERYONE"},
    {"upload_type": "VIDEO"},
    {"limit": 0},
    {"page": "abc"},
])
def test_search_rejects_bad_parameters(users, kwargs):
    with pytest.raises(ValidationError):
        search_assets(users.creator, **kwargs)


def test_search_page_must_be_a_number(users):
    with pytest.raises(ValidationError) as exc:
        search_assets(users.admin, page="abc")
    assert exc.value.fields == {"page": "not a number"}
    assert search_assets(users.admin, page="0").page == 1


def test_assets_by_ids_drops_what_the_user_cannot_list(users, make_asset):
    mine = make_asset(users.creator)
    hidden = make_asset(users.seo, visibility=Visibility.ADMIN_ONLY)
    assert [a.id for a in assets_by_ids(users.creator, [hidden.id, mine.id, mine.id, 99999])] == [mine.id]
    assert assets_by_ids(users.creator, []) == []


def test_pending_review_queue_is_admin_only(users, make_asset):
    pending = make_asset(users.creator, status=AssetStatus.PENDING_REVIEW)
    make_asset(users.creator, status=AssetStatus.DRAFT)
    make_asset(users.creator, upload_type=UploadType.DOC, visibility=Visibility.UPLOADER_ONLY,
               status=AssetStatus.PENDING_REVIEW)

    assert [a.id for a in pending_review_assets(users.admin)] == [pending.id]
    with pytest.raises(AuthorizationError):
        pending_review_assets(users.seo)
    assert Asset.query.count() == 3
