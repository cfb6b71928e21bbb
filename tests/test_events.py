import datetime as dt

import pytest

from tests.helpers import create_collection, create_event

YESTERDAY = (dt.date.today() - dt.timedelta(days=1)).isoformat()
TODAY = dt.date.today().isoformat()
NEXT_MONTH = (dt.date.today() + dt.timedelta(days=30)).isoformat()


@pytest.mark.asyncio
async def test_create_then_get_round_trip(client, alice):
    collection = await create_collection(client, alice)

    created = await create_event(
        client, alice, collection["id"], YESTERDAY, "Coin show", description="Annual show", rating=3
    )
    response = await client.get(f"/events/{created['id']}", headers=alice)

    event = response.json()["event"]
    assert event == created
    assert event["name"] == "Coin show"
    assert event["location"] == "Porto"
    assert event["date"] == YESTERDAY
    assert event["description"] == "Annual show"
    assert event["rating"] == 3


@pytest.mark.asyncio
async def test_create_requires_location_and_date(client, alice):
    collection = await create_collection(client, alice)

    response = await client.post(
        "/events",
        data={"collection_id": str(collection["id"]), "name": "Fair", "location": "", "date": NEXT_MONTH},
        headers=alice,
    )
    assert response.status_code == 400
    assert "location" in response.json()["error"]

    response = await client.post(
        "/events",
        data={"collection_id": collection["id"], "name": "Fair", "location": "Lisbon"},
        headers=alice,
    )
    assert response.status_code == 400
    assert "date" in response.json()["error"]


@pytest.mark.asyncio
async def test_rating_an_upcoming_event_is_rejected(client, alice):
    collection = await create_collection(client, alice)

    response = await client.post(
        "/events",
        data={"collection_id": collection["id"], "name": "Fair", "location": "Lisbon", "date": NEXT_MONTH, "rating": 4},
        headers=alice,
    )
    assert response.status_code == 400

    event = await create_event(client, alice, collection["id"], TODAY)
    rate = await client.post(f"/events/{event['id']}/rating", json={"rating": 4}, headers=alice)
    assert rate.status_code == 400
    assert rate.json()["error"] == "Only past events can be rated."


@pytest.mark.asyncio
async def test_rating_a_past_event(client, alice):
    collection = await create_collection(client, alice)
    event = await create_event(client, alice, collection["id"], YESTERDAY)

    response = await client.post(f"/events/{event['id']}/rating", json={"rating": 5}, headers=alice)

    assert response.status_code == 200
    assert response.json()["event"]["rating"] == 5


@pytest.mark.asyncio
@pytest.mark.parametrize("rating", [6, -1])
async def test_rating_out_of_range_is_rejected(client, alice, rating):
    collection = await create_collection(client, alice)
    event = await create_event(client, alice, collection["id"], YESTERDAY)

    response = await client.post(f"/events/{event['id']}/rating", json={"rating": rating}, headers=alice)
    assert response.status_code == 400

    create = await client.post(
        "/events",
        data={"collection_id": collection["id"], "name": "X", "location": "Y", "date": YESTERDAY, "rating": rating},
        headers=alice,
    )
    assert create.status_code == 400


@pytest.mark.asyncio
async def test_rating_requires_ownership(client, alice, bob):
    collection = await create_collection(client, alice)
    event = await create_event(client, alice, collection["id"], YESTERDAY)

    response = await client.post(f"/events/{event['id']}/rating", json={"rating": 1}, headers=bob)

    assert response.status_code == 403
    fetched = await client.get(f"/events/{event['id']}", headers=alice)
    assert fetched.json()["event"]["rating"] is None


@pytest.mark.asyncio
async def test_moving_a_rated_event_into_the_future_is_rejected(client, alice):
    collection = await create_collection(client, alice)
    event = await create_event(client, alice, collection["id"], YESTERDAY, rating=2)

    response = await client.patch(f"/events/{event['id']}", json={"date": NEXT_MONTH}, headers=alice)
    assert response.status_code == 400

    response = await client.patch(
        f"/events/{event['id']}", json={"date": NEXT_MONTH, "rating": None}, headers=alice
    )
    assert response.status_code == 200
    assert response.json()["event"]["date"] == NEXT_MONTH
    assert response.json()["event"]["rating"] is None


@pytest.mark.asyncio
async def test_other_user_is_forbidden(client, alice, bob):
    collection = await create_collection(client, alice)
    event = await create_event(client, alice, collection["id"], NEXT_MONTH)
    url = f"/events/{event['id']}"

    assert (await client.get(url, headers=bob)).status_code == 403
    assert (await client.patch(url, json={"name": "Mine"}, headers=bob)).status_code == 403
    assert (await client.delete(url, headers=bob)).status_code == 403
    assert (await client.get("/events", params={"collection_id": collection["id"]}, headers=bob)).status_code == 403


@pytest.mark.asyncio
async def test_move_to_foreign_collection_is_forbidden(client, alice, bob):
    own = await create_collection(client, alice)
    foreign = await create_collection(client, bob, "Bob's")
    event = await create_event(client, alice, own["id"], NEXT_MONTH)

    response = await client.patch(f"/events/{event['id']}", json={"collection_id": foreign["id"]}, headers=alice)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_is_ordered_by_date_and_scoped_to_caller(client, alice, bob):
    coins = await create_collection(client, alice, "Coins")
    stamps = await create_collection(client, alice, "Stamps")
    bobs = await create_collection(client, bob, "Cards")

    await create_event(client, alice, coins["id"], NEXT_MONTH, "Late")
    await create_event(client, alice, stamps["id"], YESTERDAY, "Early")
    await create_event(client, alice, coins["id"], TODAY, "Middle")
    await create_event(client, bob, bobs["id"], YESTERDAY, "Bob's event")

    response = await client.get("/events", headers=alice)

    events = response.json()["events"]
    assert [e["name"] for e in events] == ["Early", "Middle", "Late"]
    assert [e["collection_name"] for e in events] == ["Stamps", "Coins", "Coins"]

    coins_only = await client.get("/events", params={"collection_id": coins["id"]}, headers=alice)
    assert [e["name"] for e in coins_only.json()["events"]] == ["Middle", "Late"]


@pytest.mark.asyncio
async def test_list_when_filter(client, alice):
    collection = await create_collection(client, alice)
    await create_event(client, alice, collection["id"], YESTERDAY, "Past")
    await create_event(client, alice, collection["id"], TODAY, "Today")
    await create_event(client, alice, collection["id"], NEXT_MONTH, "Future")

    coming = await client.get("/events", params={"when": "coming"}, headers=alice)
    assert [e["name"] for e in coming.json()["events"]] == ["Today", "Future"]

    past = await client.get("/events", params={"when": "past"}, headers=alice)
    assert [e["name"] for e in past.json()["events"]] == ["Past"]

    invalid = await client.get("/events", params={"when": "soon"}, headers=alice)
    assert invalid.status_code == 400


@pytest.mark.asyncio
async def test_delete_then_delete_again(client, alice):
    collection = await create_collection(client, alice)
    event = await create_event(client, alice, collection["id"], NEXT_MONTH)

    first = await client.delete(f"/events/{event['id']}", headers=alice)
    assert first.json() == {"success": True, "deleted_id": event["id"]}

    second = await client.delete(f"/events/{event['id']}", headers=alice)
    assert second.status_code == 404
