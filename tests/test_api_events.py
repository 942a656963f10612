import uuid
from decimal import Decimal

import pytest

from app.models.theater import SeatType
from app.schemas.layout import SeatConfig

API = "/api/v1"


def event_payload(**overrides):
    payload = {
        "title": "Jazz Night",
        "description": "Live quartet",
        "date": "2030-06-01T20:00:00Z",
        "location": "Grand Hall",
        "category": "concert",
        "ticket_price": "40.00",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def theater(make_theater):
    return make_theater(
        seat_config=[
            SeatConfig(row="A", seat_number=1, seat_type=SeatType.VIP),
            SeatConfig(row="E", seat_number=10, is_active=False),
        ]
    )


@pytest.fixture
def seated_payload(theater):
    return event_payload(
        has_theater_seating=True,
        theater_id=str(theater.id),
        seat_pricing={"standard": "50", "vip": "120"},
    )


def _create(client, headers, user, payload):
    resp = client.post(f"{API}/events/", json=payload, headers=headers(user))
    assert resp.status_code == 201, resp.text
    return resp.json()


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


def test_create_seated_event_copies_theater(client, organizer, headers, theater, seated_payload):
    seated_payload["seat_config"] = [{"row": "A", "seat_number": 2, "seat_type": "vip"}]

    event = _create(client, headers, organizer, seated_payload)

    assert event["status"] == "pending"
    assert event["total_seats"] == 49
    assert event["vip_seats"] == 2
    assert event["total_tickets"] == 49
    assert event["remaining_tickets"] == 49
    assert event["theater"]["id"] == str(theater.id)
    assert event["layout"]["main_floor"]["rows"] == 5
    assert len(event["seat_config"]) == 3
    assert Decimal(event["seat_pricing"]["vip"]) == Decimal("120")
    assert event["version"] == 1


def test_event_layout_is_independent_of_theater(client, organizer, headers, theater, seated_payload):
    event = _create(client, headers, organizer, seated_payload)

    resp = client.put(
        f"{API}/theaters/{theater.id}",
        json={"layout": {"main_floor": {"rows": 8}}},
        headers=headers(organizer),
    )
    assert resp.status_code == 200

    fresh = client.get(f"{API}/events/{event['id']}").json()
    assert fresh["layout"]["main_floor"]["rows"] == 5
    assert fresh["total_seats"] == 49


def test_create_general_admission_event(client, organizer, headers):
    event = _create(client, headers, organizer, event_payload(total_tickets=200))

    assert event["has_theater_seating"] is False
    assert event["remaining_tickets"] == 200
    assert event["layout"] is None
    assert event["theater"] is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"has_theater_seating": True, "seat_pricing": {"standard": "10"}},
        {"has_theater_seating": True, "theater_id": str(uuid.uuid4())},
        {"total_tickets": None},
        {"ticket_price": "-1"},
        {"total_tickets": 10, "seat_pricing": {"standard": "-5"}},
    ],
)
def test_create_event_validation(client, organizer, headers, overrides):
    resp = client.post(f"{API}/events/", json=event_payload(**overrides), headers=headers(organizer))

    assert resp.status_code == 422
    assert resp.json()["error"] == "VALIDATION_ERROR"


def test_seated_event_needs_active_theater(client, organizer, headers, theater, seated_payload):
    client.delete(f"{API}/theaters/{theater.id}", headers=headers(organizer))

    resp = client.post(f"{API}/events/", json=seated_payload, headers=headers(organizer))

    assert resp.status_code == 404
    assert resp.json()["error"] == "THEATER_NOT_FOUND"


def test_total_tickets_cannot_exceed_seats(client, organizer, headers, seated_payload):
    seated_payload["total_tickets"] = 500

    resp = client.post(f"{API}/events/", json=seated_payload, headers=headers(organizer))

    assert resp.status_code == 400


def test_standard_user_cannot_create_event(client, customer, headers):
    resp = client.post(f"{API}/events/", json=event_payload(total_tickets=5), headers=headers(customer))
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Listing and approval
# ---------------------------------------------------------------------------


def test_public_list_shows_approved_events_only(client, organizer, admin, headers):
    event = _create(client, headers, organizer, event_payload(total_tickets=10))

    assert client.get(f"{API}/events/").json()["total"] == 0
    mine = client.get(f"{API}/events/mine", headers=headers(organizer)).json()
    assert [e["id"] for e in mine["data"]] == [event["id"]]

    resp = client.patch(
        f"{API}/admin/events/{event['id']}/status",
        json={"status": "approved"},
        headers=headers(admin),
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "approved"

    public = client.get(f"{API}/events/").json()
    assert [e["id"] for e in public["data"]] == [event["id"]]
    assert client.get(f"{API}/events/?category=theatre").json()["total"] == 0

    pending = client.get(f"{API}/admin/events/?status=pending", headers=headers(admin)).json()
    assert pending["total"] == 0


def test_status_change_requires_admin(client, organizer, headers):
    event = _create(client, headers, organizer, event_payload(total_tickets=10))

    resp = client.patch(
        f"{API}/admin/events/{event['id']}/status",
        json={"status": "approved"},
        headers=headers(organizer),
    )
    assert resp.status_code == 403


def test_unknown_event(client):
    resp = client.get(f"{API}/events/{uuid.uuid4()}")

    assert resp.status_code == 404
    assert resp.json() == {
        "error": "EVENT_NOT_FOUND",
        "message": "Event not found",
        "details": None,
    }


# ---------------------------------------------------------------------------
# Seat map
# ---------------------------------------------------------------------------


def test_seat_map(client, make_event, theater, customer, headers):
    event = make_event(theater=theater)
    booked = client.post(
        f"{API}/bookings/",
        json={"event_id": str(event.id), "selected_seats": [{"row": "A", "seat_number": 1}]},
        headers=headers(customer),
    )
    assert booked.status_code == 201, booked.text

    resp = client.get(f"{API}/events/{event.id}/seats")

    assert resp.status_code == 200
    body = resp.json()
    seats = {(s["row"], s["seat_number"]): s for s in body["seats"]}
    assert len(body["seats"]) == 50
    assert body["seats"][0]["row"] == "A" and body["seats"][0]["seat_number"] == 1
    assert seats[("A", 1)]["is_booked"] is True
    assert seats[("A", 1)]["seat_type"] == "vip"
    assert Decimal(seats[("A", 1)]["price"]) == Decimal("100")
    assert Decimal(seats[("A", 2)]["price"]) == Decimal("50")
    assert seats[("E", 10)]["is_active"] is False
    assert body["booked_count"] == 1
    assert body["available_count"] == 48
    assert body["remaining_tickets"] == 48


def test_seat_map_of_unseated_event(client, make_event):
    event = make_event(total_tickets=10)

    resp = client.get(f"{API}/events/{event.id}/seats")

    assert resp.status_code == 400
    assert resp.json()["error"] == "NOT_SEATED_EVENT"


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------


def test_update_total_tickets_moves_remaining(client, make_event, organizer, customer, headers):
    event = make_event(total_tickets=10)
    client.post(
        f"{API}/bookings/",
        json={"event_id": str(event.id), "number_of_tickets": 4},
        headers=headers(customer),
    )
    url = f"{API}/events/{event.id}"

    resp = client.patch(url, json={"total_tickets": 15}, headers=headers(organizer))
    assert resp.status_code == 200, resp.text
    assert resp.json()["remaining_tickets"] == 11

    resp = client.patch(url, json={"total_tickets": 3}, headers=headers(organizer))
    assert resp.status_code == 400


def test_update_seat_config_recomputes_aggregates(client, make_event, theater, organizer, headers):
    event = make_event(theater=theater)

    resp = client.patch(
        f"{API}/events/{event.id}",
        json={
            "title": "Jazz Night (late show)",
            "seat_config": [{"row": "B", "seat_number": 5, "seat_type": "premium"}],
            "seat_pricing": {"standard": "55", "premium": "80"},
        },
        headers=headers(organizer),
    )

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["title"] == "Jazz Night (late show)"
    assert body["premium_seats"] == 1
    assert body["version"] == 2
    assert set(body["seat_pricing"]) == {"standard", "premium"}


def test_update_total_tickets_capped_by_seats(client, make_event, make_theater, organizer, headers):
    event = make_event(theater=make_theater())
    url = f"{API}/events/{event.id}"

    resp = client.patch(url, json={"total_tickets": 500}, headers=headers(organizer))
    assert resp.status_code == 400
    assert resp.json()["error"] == "BAD_REQUEST"
    assert "50 seat(s)" in resp.json()["message"]

    resp = client.patch(url, json={"total_tickets": 40}, headers=headers(organizer))
    assert resp.status_code == 200, resp.text
    assert resp.json()["total_tickets"] == 40
    assert resp.json()["remaining_tickets"] == 40


def test_deactivating_seats_trims_unsold_tickets(client, make_event, make_theater, organizer, headers):
    event = make_event(theater=make_theater(rows=1, seats_per_row=2))

    resp = client.patch(
        f"{API}/events/{event.id}",
        json={"seat_config": [
            {"row": "A", "seat_number": 1, "is_active": False},
            {"row": "A", "seat_number": 2, "is_active": False},
        ]},
        headers=headers(organizer),
    )

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["total_seats"] == 0
    assert body["total_tickets"] == 0
    assert body["remaining_tickets"] == 0


def test_deactivating_seats_keeps_sold_tickets(
    client, make_event, make_theater, organizer, customer, headers
):
    event = make_event(theater=make_theater(rows=1, seats_per_row=3))
    booked = client.post(
        f"{API}/bookings/",
        json={"event_id": str(event.id), "selected_seats": [{"row": "A", "seat_number": 1}]},
        headers=headers(customer),
    )
    assert booked.status_code == 201, booked.text

    resp = client.patch(
        f"{API}/events/{event.id}",
        json={"seat_config": [{"row": "A", "seat_number": 3, "is_active": False}]},
        headers=headers(organizer),
    )

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["total_seats"] == 2
    assert body["total_tickets"] == 2
    assert body["remaining_tickets"] == 1


def test_seated_event_keeps_seat_pricing(client, make_event, make_theater, organizer, headers):
    event = make_event(theater=make_theater())

    resp = client.patch(
        f"{API}/events/{event.id}", json={"seat_pricing": {}}, headers=headers(organizer)
    )

    assert resp.status_code == 400
    assert client.get(f"{API}/events/{event.id}").json()["seat_pricing"] != {}


def test_update_with_stale_version_conflicts(client, make_event, organizer, headers):
    event = make_event(total_tickets=10)
    url = f"{API}/events/{event.id}"

    assert client.patch(url, json={"title": "v2", "version": 1}, headers=headers(organizer)).status_code == 200

    resp = client.patch(url, json={"title": "v3", "version": 1}, headers=headers(organizer))
    assert resp.status_code == 409
    assert resp.json()["error"] == "CONFLICT"


def test_only_owner_can_update(client, make_event, other_organizer, headers):
    event = make_event(total_tickets=10)

    resp = client.patch(f"{API}/events/{event.id}", json={"title": "x"}, headers=headers(other_organizer))
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------


def test_delete_blocked_by_confirmed_bookings(client, make_event, organizer, customer, headers):
    event = make_event(total_tickets=10)
    booking = client.post(
        f"{API}/bookings/",
        json={"event_id": str(event.id), "number_of_tickets": 1},
        headers=headers(customer),
    ).json()
    url = f"{API}/events/{event.id}"

    assert client.delete(url, headers=headers(organizer)).status_code == 400

    client.patch(f"{API}/bookings/{booking['id']}/cancel", headers=headers(customer))
    resp = client.delete(url, headers=headers(organizer))
    assert resp.status_code == 200
    assert client.get(url).status_code == 404
