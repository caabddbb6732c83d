# tests/test_routes/test_pipeline_routes.py
import uuid

from backoffice.core.enums import ListingStatus


async def create_listing(client, headers, name="Widget A"):
    category = await client.post("/create-new/categories", headers=headers, json={"name": "Electronics"})
    assert category.status_code == 201
    response = await client.post(
        "/create-new/listings",
        headers=headers,
        json={"product_name": name, "category_id": category.json()["id"]},
    )
    assert response.status_code == 201
    return response.json()


def stage_ids(response):
    return [listing["id"] for listing in response.json()["listings"]]


async def test_widget_a_through_every_stage(client, auth_headers, operator):
    listing = await create_listing(client, auth_headers)
    listing_id = listing["id"]
    assert listing["status"] == "cpv"
    assert listing["category_name"] == "Electronics"
    assert stage_ids(await client.get("/cpv", headers=auth_headers)) == [listing_id]

    response = await client.post(f"/cpv/{listing_id}/details", headers=auth_headers,
                                 json={"title": "  Widget A  ", "description": "Blue"})
    assert response.json()["status"] == "assign"
    assert response.json()["title"] == "Widget A"

    admins = await client.get("/assign/admins", headers=auth_headers)
    assert str(operator.id) in [admin["id"] for admin in admins.json()]

    response = await client.post(f"/assign/{listing_id}", headers=auth_headers, json={"admin_id": str(operator.id)})
    assert response.json()["status"] == "worklist"
    assert response.json()["assignee_code"] == "B02"

    worklist = await client.get("/worklist", headers=auth_headers, params={"assigned_to": str(operator.id)})
    assert stage_ids(worklist) == [listing_id]

    assert (await client.post(f"/worklist/{listing_id}/complete", headers=auth_headers)).json()["status"] == "nr"
    assert (await client.post(f"/nr/{listing_id}/reject", headers=auth_headers)).json()["status"] == "np"
    assert stage_ids(await client.get("/np", headers=auth_headers)) == [listing_id]
    assert (await client.post(f"/np/{listing_id}/resubmit", headers=auth_headers)).json()["status"] == "nr"
    assert (await client.post(f"/nr/{listing_id}/pass", headers=auth_headers)).json()["status"] == "pr"

    response = await client.post("/pr/publish", headers=auth_headers, json={"listing_ids": [listing_id, listing_id]})
    assert response.status_code == 200
    assert response.json()["published"] == 1

    fetched = await client.get(f"/listings/{listing_id}", headers=auth_headers)
    assert fetched.json()["status"] == ListingStatus.PUBLISHED.value


async def test_stage_view_shape(client, auth_headers):
    await create_listing(client, auth_headers)

    body = (await client.get("/cpv", headers=auth_headers)).json()

    assert body["status"] == "cpv"
    assert body["label"] == "CPV"
    assert body["count"] == 1


async def test_illegal_transition_is_409(client, auth_headers):
    listing = await create_listing(client, auth_headers)

    response = await client.post(f"/nr/{listing['id']}/pass", headers=auth_headers)

    assert response.status_code == 409
    assert response.json()["current_status"] == "cpv"
    assert response.json()["target_status"] == "pr"


async def test_blank_title_is_422(client, auth_headers):
    listing = await create_listing(client, auth_headers)

    response = await client.post(f"/cpv/{listing['id']}/details", headers=auth_headers, json={"title": "   "})

    assert response.status_code == 422
    listing_after = await client.get(f"/listings/{listing['id']}", headers=auth_headers)
    assert listing_after.json()["status"] == "cpv"


async def test_overlong_product_name_is_422(client, auth_headers):
    category = await client.post("/create-new/categories", headers=auth_headers, json={"name": "Toys"})
    response = await client.post(
        "/create-new/listings",
        headers=auth_headers,
        json={"product_name": "x" * 201, "category_id": category.json()["id"]},
    )
    assert response.status_code == 422


async def test_unknown_listing_is_404(client, auth_headers):
    response = await client.post(f"/worklist/{uuid.uuid4()}/complete", headers=auth_headers)
    assert response.status_code == 404


async def test_empty_publish_batch_is_422(client, auth_headers):
    response = await client.post("/pr/publish", headers=auth_headers, json={"listing_ids": []})
    assert response.status_code == 422


async def test_soft_delete_restore_and_purge(client, auth_headers):
    listing = await create_listing(client, auth_headers)
    listing_id = listing["id"]

    deleted = await client.delete(f"/listings/{listing_id}", headers=auth_headers)
    assert deleted.status_code == 200
    assert deleted.json()["deleted_at"] is not None
    assert stage_ids(await client.get("/cpv", headers=auth_headers)) == []
    assert [item["id"] for item in (await client.get("/deleted-listings", headers=auth_headers)).json()] == [listing_id]

    restored = await client.post(f"/deleted-listings/{listing_id}/restore", headers=auth_headers)
    assert restored.json()["deleted_at"] is None
    assert stage_ids(await client.get("/cpv", headers=auth_headers)) == [listing_id]

    await client.delete(f"/listings/{listing_id}", headers=auth_headers)
    unconfirmed = await client.delete(f"/deleted-listings/{listing_id}", headers=auth_headers)
    assert unconfirmed.status_code == 422

    purged = await client.delete(f"/deleted-listings/{listing_id}", headers=auth_headers, params={"confirm": "true"})
    assert purged.json() == {"id": listing_id, "purged": True}
    assert (await client.get(f"/listings/{listing_id}", headers=auth_headers)).status_code == 404


async def test_category_delete_needs_replacement(client, auth_headers):
    listing = await create_listing(client, auth_headers)
    category_id = listing["category_id"]
    other = (await client.post("/create-new/categories", headers=auth_headers, json={"name": "Gadgets"})).json()

    blocked = await client.delete(f"/data-block/categories/{category_id}", headers=auth_headers)
    assert blocked.status_code == 409
    assert blocked.json()["listing_count"] == 1

    done = await client.delete(
        f"/data-block/categories/{category_id}", headers=auth_headers, params={"replacement_id": other["id"]}
    )
    assert done.status_code == 200
    assert done.json()["reassigned"] == 1

    fetched = await client.get(f"/listings/{listing['id']}", headers=auth_headers)
    assert fetched.json()["category_name"] == "Gadgets"


async def test_data_block_search_and_trend(client, auth_headers):
    await create_listing(client, auth_headers, name="Trail Runner Shoe")

    search = await client.get("/data-block/search", headers=auth_headers, params={"q": "runner"})
    assert search.json()["count"] == 1

    trend = await client.get("/trend-analysis", headers=auth_headers, params={"q": "trail"})
    assert trend.json()["found"] is True
    assert trend.json()["listing"]["product_name"] == "Trail Runner Shoe"

    missing = await client.get("/trend-analysis", headers=auth_headers, params={"q": "kayak"})
    assert missing.json() == {"query": "kayak", "found": False, "listing": None}


async def test_dashboard(client, auth_headers, lead_admin):
    await create_listing(client, auth_headers)

    body = (await client.get("/", headers=auth_headers, params={"admin_code": "A01"})).json()

    assert body["listed"] == 1
    assert body["status_counts"]["cpv"] == 1
    assert body["selected_admin"] == "A01"
    assert body["workloads"] == [{"admin_id": str(lead_admin.id), "admin_code": "A01", "count": 0}]


async def test_draft_placeholder(client, auth_headers):
    response = await client.get("/draft", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["listings"] == []


async def test_pipeline_keeps_working_when_audit_writes_fail(client, auth_headers, operator, mocker):
    listing_id = (await create_listing(client, auth_headers))["id"]
    mocker.patch(
        "backoffice.services.activity_logger.AdminActivityLog",
        side_effect=RuntimeError("audit table unavailable"),
    )

    response = await client.post(f"/cpv/{listing_id}/details", headers=auth_headers, json={"title": "Widget A"})
    assert response.status_code == 200

    response = await client.post(f"/assign/{listing_id}", headers=auth_headers, json={"admin_id": str(operator.id)})
    assert response.status_code == 200
    assert response.json()["status"] == "worklist"
    assert response.json()["assignee_code"] == "B02"

    assert (await client.post(f"/worklist/{listing_id}/complete", headers=auth_headers)).status_code == 200

    response = await client.post(f"/nr/{listing_id}/pass", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "pr"

    response = await client.post("/pr/publish", headers=auth_headers, json={"listing_ids": [listing_id]})
    assert response.status_code == 200
    assert response.json()["published"] == 1

    fetched = await client.get(f"/listings/{listing_id}", headers=auth_headers)
    assert fetched.json()["status"] == "published"
