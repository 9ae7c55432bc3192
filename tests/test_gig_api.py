import asyncio

from conftest import (
    BIDDER_B_ID,
    OUTSIDER_D_ID,
    OWNER_ID,
    auth_headers,
    create_gig,
    submit_bid,
)


async def hire(client, bid_id, caller_id=OWNER_ID):
    return await client.patch(f"/bids/{bid_id}/hire", headers=auth_headers(caller_id))


async def test_create_then_get_round_trip(client):
    created = await create_gig(client, title="Logo design", budget=120.5)

    response = await client.get(f"/gigs/{created['gig_id']}")
    assert response.status_code == 200
    fetched = response.json()
    assert fetched["title"] == "Logo design"
    assert fetched["description"] == created["description"]
    assert fetched["budget"] == 120.5
    assert fetched["owner_id"] == OWNER_ID
    assert fetched["status"] == "open"
    assert fetched["bid_count"] == 0


async def test_create_requires_authentication(client):
    response = await client.post(
        "/gigs/", json={"title": "No token", "description": "Nope", "budget": 10}
    )
    assert response.status_code == 401


async def test_create_rejects_non_positive_budget(client):
    response = await client.post(
        "/gigs/",
        json={"title": "Free work", "description": "Please", "budget": 0},
        headers=auth_headers(OWNER_ID),
    )
    assert response.status_code == 422
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_create_rejects_infinite_budget(client):
    # httpx will not encode inf, so the raw JSON is sent as-is
    response = await client.post(
        "/gigs/",
        content='{"title": "Endless", "description": "No ceiling", "budget": Infinity}',
        headers={**auth_headers(OWNER_ID), "Content-Type": "application/json"},
    )
    assert response.status_code == 422
    assert response.json()["error"] == "VALIDATION_ERROR"

    listed = await client.get("/gigs/")
    assert listed.json() == []


async def test_create_rejects_budget_above_column_limit(client):
    too_big = await client.post(
        "/gigs/",
        json={"title": "Huge", "description": "Too much money", "budget": 100_000_000},
        headers=auth_headers(OWNER_ID),
    )
    assert too_big.status_code == 422
    assert too_big.json()["error"] == "VALIDATION_ERROR"

    at_limit = await create_gig(client, title="Max", budget=99_999_999.99)
    assert at_limit["budget"] == 99_999_999.99


async def test_update_rejects_infinite_or_nan_budget(client):
    gig = await create_gig(client)

    for raw in ("Infinity", "NaN"):
        response = await client.put(
            f"/gigs/{gig['gig_id']}",
            content=f'{{"budget": {raw}}}',
            headers={**auth_headers(OWNER_ID), "Content-Type": "application/json"},
        )
        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"

    fetched = await client.get(f"/gigs/{gig['gig_id']}")
    assert fetched.json()["budget"] == gig["budget"]


async def test_create_rejects_blank_title(client):
    response = await client.post(
        "/gigs/",
        json={"title": "   ", "description": "Whitespace title", "budget": 10},
        headers=auth_headers(OWNER_ID),
    )
    assert response.status_code == 422


async def test_get_unknown_gig_is_not_found(client):
    response = await client.get("/gigs/does-not-exist")
    assert response.status_code == 404
    assert response.json()["error"] == "NOT_FOUND"


async def test_search_is_case_insensitive_and_newest_first(client):
    first = await create_gig(client, title="Python scraper")
    await asyncio.sleep(0.01)
    await create_gig(client, title="Logo design")
    await asyncio.sleep(0.01)
    second = await create_gig(client, title="Fix my PYTHON tests")

    response = await client.get("/gigs/", params={"search": "  python "})
    assert response.status_code == 200
    ids = [g["gig_id"] for g in response.json()]
    assert ids == [second["gig_id"], first["gig_id"]]

    everything = await client.get("/gigs/", params={"search": "   "})
    assert len(everything.json()) == 3


async def test_search_escapes_like_wildcards(client):
    await create_gig(client, title="100% remote job")
    await create_gig(client, title="Onsite job")

    response = await client.get("/gigs/", params={"search": "%"})
    titles = [g["title"] for g in response.json()]
    assert titles == ["100% remote job"]


async def test_listing_only_shows_open_gigs(client):
    gig = await create_gig(client)
    other = await create_gig(client, title="Still open")
    bid = (await submit_bid(client, gig["gig_id"], BIDDER_B_ID)).json()
    assert (await hire(client, bid["bid_id"])).status_code == 200

    response = await client.get("/gigs/")
    ids = [g["gig_id"] for g in response.json()]
    assert ids == [other["gig_id"]]


async def test_assigned_gig_visible_only_to_owner(client):
    gig = await create_gig(client)
    bid = (await submit_bid(client, gig["gig_id"], BIDDER_B_ID)).json()
    await hire(client, bid["bid_id"])

    anonymous = await client.get(f"/gigs/{gig['gig_id']}")
    assert anonymous.status_code == 404

    stranger = await client.get(f"/gigs/{gig['gig_id']}", headers=auth_headers(OUTSIDER_D_ID))
    assert stranger.status_code == 404

    owner = await client.get(f"/gigs/{gig['gig_id']}", headers=auth_headers(OWNER_ID))
    assert owner.status_code == 200
    assert owner.json()["status"] == "assigned"


async def test_my_gigs_lists_every_status(client):
    gig = await create_gig(client)
    await create_gig(client, owner_id=OUTSIDER_D_ID, title="Not mine")
    bid = (await submit_bid(client, gig["gig_id"], BIDDER_B_ID)).json()
    await hire(client, bid["bid_id"])

    response = await client.get("/gigs/my", headers=auth_headers(OWNER_ID))
    assert response.status_code == 200
    data = response.json()
    assert [g["gig_id"] for g in data] == [gig["gig_id"]]
    assert data[0]["status"] == "assigned"


async def test_owner_can_partially_update_open_gig(client):
    gig = await create_gig(client)

    response = await client.put(
        f"/gigs/{gig['gig_id']}", json={"budget": 750}, headers=auth_headers(OWNER_ID)
    )
    assert response.status_code == 200
    data = response.json()
    assert data["budget"] == 750
    assert data["title"] == gig["title"]
    assert data["owner_id"] == OWNER_ID


async def test_update_with_explicit_null_is_validation_error(client):
    gig = await create_gig(client)
    response = await client.put(
        f"/gigs/{gig['gig_id']}", json={"title": None}, headers=auth_headers(OWNER_ID)
    )
    assert response.status_code == 422
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_non_owner_cannot_update_or_delete(client):
    gig = await create_gig(client)

    update = await client.put(
        f"/gigs/{gig['gig_id']}", json={"title": "Hijacked"}, headers=auth_headers(OUTSIDER_D_ID)
    )
    assert update.status_code == 403
    assert update.json()["error"] == "FORBIDDEN"

    delete = await client.delete(f"/gigs/{gig['gig_id']}", headers=auth_headers(OUTSIDER_D_ID))
    assert delete.status_code == 403


async def test_assigned_gig_cannot_be_updated_or_deleted_by_anyone(client):
    gig = await create_gig(client)
    bid = (await submit_bid(client, gig["gig_id"], BIDDER_B_ID)).json()
    await hire(client, bid["bid_id"])

    for caller in (OWNER_ID, OUTSIDER_D_ID):
        update = await client.put(
            f"/gigs/{gig['gig_id']}", json={"title": "Too late"}, headers=auth_headers(caller)
        )
        assert update.status_code == 400
        assert update.json()["error"] == "INVALID_STATE"

        delete = await client.delete(f"/gigs/{gig['gig_id']}", headers=auth_headers(caller))
        assert delete.status_code == 400
        assert delete.json()["error"] == "INVALID_STATE"

    owner_view = await client.get(f"/gigs/{gig['gig_id']}", headers=auth_headers(OWNER_ID))
    assert owner_view.json()["title"] == gig["title"]


async def test_owner_can_delete_gig_without_bids(client):
    gig = await create_gig(client)

    response = await client.delete(f"/gigs/{gig['gig_id']}", headers=auth_headers(OWNER_ID))
    assert response.status_code == 200
    assert response.json()["gig_id"] == gig["gig_id"]

    assert (await client.get(f"/gigs/{gig['gig_id']}")).status_code == 404


async def test_gig_with_bids_cannot_be_deleted(client):
    gig = await create_gig(client)
    await submit_bid(client, gig["gig_id"], BIDDER_B_ID)

    response = await client.delete(f"/gigs/{gig['gig_id']}", headers=auth_headers(OWNER_ID))
    assert response.status_code == 400
    assert response.json()["error"] == "INVALID_STATE"

    bids = await client.get(f"/gigs/{gig['gig_id']}/bids", headers=auth_headers(OWNER_ID))
    assert len(bids.json()) == 1


async def test_health_endpoints(client):
    assert (await client.get("/")).json()["status"] == "success"
    assert (await client.get("/health")).json()["status"] == "OK"
