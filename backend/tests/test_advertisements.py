import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from skoropad.core.roles import UserRole
from skoropad.db.models.admin_log import AdminLog
from skoropad.db.models.advertisement import Advertisement


def ad_payload(**overrides):
    payload = {
        "category": "furniture",
        "subcategory": "chairs",
        "title": "Chair",
        "description": "Wooden chair",
        "telegram_contact": "@seller",
        "price": 250,
    }
    payload.update(overrides)
    return payload


async def test_create_with_single_contact(client, make_user, headers):
    seller = await make_user("seller")
    res = await client.post("/v1/advertisements/", json=ad_payload(), headers=headers(seller))
    assert res.status_code == 201
    body = res.json()
    assert body["title"] == "Chair"
    assert body["telegram_contact"] == "@seller"
    assert body["discord_contact"] is None
    assert body["price"] == 250
    assert body["images"] == []
    assert body["is_vip"] is False
    assert body["author"]["nickname"] == "seller"


@pytest.mark.parametrize("contacts", [
    {"telegram_contact": None},
    {"telegram_contact": "", "discord_contact": ""},
    {"telegram_contact": "   ", "discord_contact": None},
])
async def test_create_without_contact_is_rejected(client, make_user, headers, session_factory, contacts):
    seller = await make_user("seller")
    res = await client.post("/v1/advertisements/", json=ad_payload(title="Table", **contacts), headers=headers(seller))
    assert res.status_code == 422

    async with session_factory() as session:
        count = len((await session.execute(select(Advertisement))).scalars().all())
    assert count == 0


async def test_check_constraint_blocks_direct_insert(make_user, session_factory):
    seller = await make_user("seller")
    async with session_factory() as session:
        session.add(Advertisement(
            user_id=seller.id,
            category="furniture",
            subcategory="tables",
            title="Table",
            description="No contacts at all",
        ))
        with pytest.raises(IntegrityError):
            await session.commit()


async def test_create_requires_auth(client):
    res = await client.post("/v1/advertisements/", json=ad_payload())
    assert res.status_code == 401


async def test_vip_author_gets_vip_listing(client, make_user, headers):
    vip = await make_user("vipseller", role=UserRole.VIP)
    res = await client.post("/v1/advertisements/", json=ad_payload(), headers=headers(vip))
    assert res.json()["is_vip"] is True


async def test_listing_filters_and_vip_first(client, make_user, headers):
    seller = await make_user("seller")
    vip = await make_user("vipseller", role=UserRole.VIP)
    await client.post("/v1/advertisements/", json=ad_payload(title="Old chair"), headers=headers(seller))
    await client.post("/v1/advertisements/", json=ad_payload(title="VIP sofa", subcategory="sofas"), headers=headers(vip))
    await client.post(
        "/v1/advertisements/",
        json=ad_payload(title="Bike", category="sport", subcategory="bikes", description="Mountain bike"),
        headers=headers(seller),
    )

    res = await client.get("/v1/advertisements/")
    titles = [ad["title"] for ad in res.json()]
    assert titles[0] == "VIP sofa"
    assert set(titles) == {"Old chair", "VIP sofa", "Bike"}

    res = await client.get("/v1/advertisements/", params={"category": "furniture", "subcategory": "chairs"})
    assert [ad["title"] for ad in res.json()] == ["Old chair"]

    res = await client.get("/v1/advertisements/", params={"q": "mountain"})
    assert [ad["title"] for ad in res.json()] == ["Bike"]

    res = await client.get("/v1/advertisements/", params={"q": "vipsell"})
    assert [ad["title"] for ad in res.json()] == ["VIP sofa"]

    res = await client.get("/v1/advertisements/", params={"user_id": str(seller.id)})
    assert {ad["title"] for ad in res.json()} == {"Old chair", "Bike"}


async def test_owner_updates_advertisement(client, make_user, headers):
    seller = await make_user("seller")
    created = (await client.post("/v1/advertisements/", json=ad_payload(), headers=headers(seller))).json()

    res = await client.patch(
        f"/v1/advertisements/{created['id']}",
        json={"price": 199.5, "discord_contact": "seller#1234", "images": ["/uploads/advertisements/a.png"]},
        headers=headers(seller),
    )
    assert res.status_code == 200
    body = res.json()
    assert body["price"] == 199.5
    assert body["discord_contact"] == "seller#1234"
    assert body["images"] == ["/uploads/advertisements/a.png"]

    # dropping one contact is fine while the other remains
    res = await client.patch(f"/v1/advertisements/{created['id']}", json={"telegram_contact": ""}, headers=headers(seller))
    assert res.status_code == 200
    assert res.json()["telegram_contact"] is None

    # dropping the last one is not
    res = await client.patch(f"/v1/advertisements/{created['id']}", json={"discord_contact": None}, headers=headers(seller))
    assert res.status_code == 422


@pytest.mark.parametrize("field", ["title", "category", "subcategory", "description", "images"])
async def test_update_rejects_null_for_required_fields(client, make_user, headers, field):
    seller = await make_user("seller")
    created = (await client.post("/v1/advertisements/", json=ad_payload(), headers=headers(seller))).json()

    res = await client.patch(f"/v1/advertisements/{created['id']}", json={field: None}, headers=headers(seller))
    assert res.status_code == 422
    assert "contact" not in str(res.json()["detail"])

    res = await client.get(f"/v1/advertisements/{created['id']}")
    assert res.json()[field] == created[field]


async def test_update_cannot_set_vip_flag(client, make_user, headers):
    seller = await make_user("seller")
    created = (await client.post("/v1/advertisements/", json=ad_payload(), headers=headers(seller))).json()
    res = await client.patch(f"/v1/advertisements/{created['id']}", json={"is_vip": True}, headers=headers(seller))
    assert res.status_code == 200
    assert res.json()["is_vip"] is False


async def test_non_owner_cannot_edit_or_delete(client, make_user, headers):
    seller = await make_user("seller")
    other = await make_user("other")
    created = (await client.post("/v1/advertisements/", json=ad_payload(), headers=headers(seller))).json()

    res = await client.patch(f"/v1/advertisements/{created['id']}", json={"title": "Mine now"}, headers=headers(other))
    assert res.status_code == 403
    res = await client.delete(f"/v1/advertisements/{created['id']}", headers=headers(other))
    assert res.status_code == 403


async def test_owner_deletes_without_audit(client, make_user, headers, session_factory):
    seller = await make_user("seller")
    created = (await client.post("/v1/advertisements/", json=ad_payload(), headers=headers(seller))).json()

    res = await client.delete(f"/v1/advertisements/{created['id']}", headers=headers(seller))
    assert res.status_code == 204
    assert (await client.get(f"/v1/advertisements/{created['id']}")).status_code == 404

    async with session_factory() as session:
        assert (await session.execute(select(AdminLog))).scalars().all() == []


async def test_moderator_delete_is_audited(client, make_user, headers, session_factory):
    seller = await make_user("seller")
    moderator = await make_user("mod", role=UserRole.MODERATOR)
    created = (await client.post("/v1/advertisements/", json=ad_payload(), headers=headers(seller))).json()

    res = await client.delete(f"/v1/advertisements/{created['id']}", headers=headers(moderator))
    assert res.status_code == 204

    async with session_factory() as session:
        logs = (await session.execute(select(AdminLog))).scalars().all()
    assert len(logs) == 1
    assert logs[0].action == "delete_advertisement"
    assert logs[0].admin_id == moderator.id
    assert logs[0].target_user_id == seller.id
    assert logs[0].details["advertisement_title"] == "Chair"
    assert logs[0].details["advertisement_author"] == "seller"


async def test_missing_advertisement(client):
    res = await client.get("/v1/advertisements/00000000-0000-0000-0000-000000000000")
    assert res.status_code == 404
