"""HTTP-level tests: routing, actor headers, error envelope, and response shapes."""
from decimal import Decimal

from tests.conftest import (
    ADMIN, CLIENT, MANAGER, OTHER_CLIENT, actor_headers, create_event_via_api, future_date,
)


def _book_via_api(client, catalog, event_id, actor=CLIENT, service="decoration_id", price="75000.00", quantity=1):
    return client.post(
        f"/api/events/{event_id}/services",
        json={"service_id": catalog[service], "quantity": quantity, "agreed_price": price},
        headers=actor_headers(actor),
    )


def _pay_via_api(client, event_id, amount, actor=CLIENT, **extra):
    payload = {"event_id": event_id, "amount": amount, "payment_method": "cash"}
    payload.update(extra)
    return client.post("/api/payments/", json=payload, headers=actor_headers(actor))


class TestHealthAndActor:

    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_missing_actor_headers(self, client, catalog):
        resp = client.get("/api/events/")
        assert resp.status_code == 422

    def test_unknown_role(self, client, catalog):
        resp = client.get("/api/events/", headers={"X-Actor-Id": "5", "X-Actor-Role": "superuser"})
        assert resp.status_code == 403
        assert resp.json()["error"] == "authorization_error"


class TestEventRoutes:

    def test_create_and_fetch(self, client, catalog):
        data = create_event_via_api(client, catalog, budget="50000.00")
        assert data["status"] == "inquiry"
        assert data["client_id"] == CLIENT.actor_id
        assert data["guest_count"] == 120

        resp = client.get(f"/api/events/{data['event_id']}", headers=actor_headers(CLIENT))
        assert resp.status_code == 200
        detail = resp.json()
        assert detail["event"]["event_name"] == "Silva Anniversary"
        assert detail["financials"]["payment_status"] == "unpaid"
        assert Decimal(detail["financials"]["balance"]) == Decimal("0")
        assert [a["action_type"] for a in detail["activities"]] == ["event_created"]
        assert detail["activities"][0]["ip_address"] == "testclient"

    def test_validation_error_envelope(self, client, catalog):
        resp = client.post(
            "/api/events/",
            json={"event_name": "X", "event_type_id": 9999, "event_date": future_date().isoformat()},
            headers=actor_headers(CLIENT),
        )
        assert resp.status_code == 400
        body = resp.json()
        assert body["error"] == "validation_error"
        assert "event type" in body["detail"]

    def test_not_found(self, client, catalog):
        resp = client.get("/api/events/999", headers=actor_headers(ADMIN))
        assert resp.status_code == 404
        assert resp.json()["error"] == "not_found"

    def test_other_client_forbidden(self, client, catalog):
        event = create_event_via_api(client, catalog)
        resp = client.get(f"/api/events/{event['event_id']}", headers=actor_headers(OTHER_CLIENT))
        assert resp.status_code == 403

    def test_list_scoped_to_client(self, client, catalog):
        create_event_via_api(client, catalog)
        create_event_via_api(client, catalog, actor=OTHER_CLIENT, event_name="Other")

        mine = client.get("/api/events/", headers=actor_headers(CLIENT)).json()
        assert [e["event_name"] for e in mine] == ["Silva Anniversary"]
        everyone = client.get("/api/events/", headers=actor_headers(MANAGER)).json()
        assert len(everyone) == 2
        filtered = client.get("/api/events/", params={"search": "other"}, headers=actor_headers(MANAGER)).json()
        assert [e["event_name"] for e in filtered] == ["Other"]

    def test_update_and_status(self, client, catalog):
        event = create_event_via_api(client, catalog)
        url = f"/api/events/{event['event_id']}"

        resp = client.put(url, json={"venue": "Mount Lavinia Hotel"}, headers=actor_headers(CLIENT))
        assert resp.status_code == 200
        assert resp.json()["venue"] == "Mount Lavinia Hotel"

        resp = client.put(f"{url}/status", json={"status": "confirmed"}, headers=actor_headers(CLIENT))
        assert resp.status_code == 403

        resp = client.put(f"{url}/status", json={"status": "completed"}, headers=actor_headers(MANAGER))
        assert resp.status_code == 409
        assert resp.json()["error"] == "invalid_transition"

        resp = client.put(f"{url}/status", json={"status": "confirmed"}, headers=actor_headers(MANAGER))
        assert resp.status_code == 200
        assert resp.json()["status"] == "confirmed"

    def test_upcoming(self, client, catalog):
        create_event_via_api(client, catalog, event_date=future_date(3).isoformat())
        create_event_via_api(client, catalog, event_date=future_date(40).isoformat())

        resp = client.get("/api/events/upcoming", params={"days": 7}, headers=actor_headers(CLIENT))
        assert resp.status_code == 200
        items = resp.json()
        assert len(items) == 1
        assert items[0]["payment_status"] == "unpaid"
        assert items[0]["days_until_event"] >= 2

    def test_upcoming_window_too_large(self, client, catalog):
        resp = client.get("/api/events/upcoming", params={"days": 100000000}, headers=actor_headers(ADMIN))
        assert resp.status_code == 422

    def test_delete(self, client, catalog):
        event = create_event_via_api(client, catalog)
        resp = client.delete(f"/api/events/{event['event_id']}", headers=actor_headers(CLIENT))
        assert resp.status_code == 204
        resp = client.get(f"/api/events/{event['event_id']}", headers=actor_headers(CLIENT))
        assert resp.status_code == 404


class TestBookingRoutes:

    def test_book_with_budget_warning(self, client, catalog):
        event = create_event_via_api(client, catalog, budget="50000.00")
        resp = _book_via_api(client, catalog, event["event_id"])
        assert resp.status_code == 201
        body = resp.json()
        assert Decimal(body["total_cost"]) == Decimal("75000")
        assert Decimal(body["budget_warning"]["overrun"]) == Decimal("25000")
        assert body["event_service"]["service_name"] == "Poruwa Decoration"
        assert body["event_service"]["status"] == "pending"

    def test_duplicate_is_conflict(self, client, catalog):
        event = create_event_via_api(client, catalog)
        assert _book_via_api(client, catalog, event["event_id"]).status_code == 201
        resp = _book_via_api(client, catalog, event["event_id"])
        assert resp.status_code == 409
        assert resp.json()["error"] == "conflict"

    def test_list_and_update_lines(self, client, catalog):
        event = create_event_via_api(client, catalog)
        line = _book_via_api(client, catalog, event["event_id"]).json()["event_service"]

        resp = client.put(
            f"/api/event-services/{line['event_service_id']}/status",
            json={"status": "confirmed"},
            headers=actor_headers(ADMIN),
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "confirmed"

        lines = client.get(f"/api/events/{event['event_id']}/services", headers=actor_headers(CLIENT)).json()
        assert [(row["event_service_id"], row["status"]) for row in lines] == [(line["event_service_id"], "confirmed")]


class TestPaymentRoutes:

    def test_record_and_auto_confirm(self, client, catalog):
        event = create_event_via_api(client, catalog)
        _book_via_api(client, catalog, event["event_id"], price="100000.00")

        first = _pay_via_api(client, event["event_id"], "40000.00")
        assert first.status_code == 201
        assert first.json()["classified_type"] == "advance"
        assert first.json()["event_auto_confirmed"] is False

        second = _pay_via_api(client, event["event_id"], "60000.00")
        assert second.json()["classified_type"] == "final"
        assert second.json()["event_auto_confirmed"] is True

        fin = client.get(f"/api/events/{event['event_id']}/financials", headers=actor_headers(CLIENT)).json()
        assert fin["payment_status"] == "paid"
        assert Decimal(fin["balance"]) == Decimal("0")

        resp = client.delete(f"/api/events/{event['event_id']}", headers=actor_headers(ADMIN))
        assert resp.status_code == 409

    def test_payment_crud(self, client, catalog):
        event = create_event_via_api(client, catalog)
        _book_via_api(client, catalog, event["event_id"])
        payment = _pay_via_api(client, event["event_id"], "1000", reference_number="RCPT-77").json()["payment"]
        url = f"/api/payments/{payment['payment_id']}"

        assert client.get(url, headers=actor_headers(CLIENT)).json()["reference_number"] == "RCPT-77"
        assert _pay_via_api(client, event["event_id"], "5", reference_number="RCPT-77").status_code == 409

        resp = client.put(url, json={"payment_method": "online", "notes": "Bank app"}, headers=actor_headers(CLIENT))
        assert resp.status_code == 200
        assert resp.json()["payment_method"] == "online"

        listed = client.get("/api/payments/", params={"event_id": event["event_id"]}, headers=actor_headers(CLIENT))
        assert [p["payment_id"] for p in listed.json()] == [payment["payment_id"]]

        assert client.delete(url, headers=actor_headers(CLIENT)).status_code == 403
        assert client.delete(url, headers=actor_headers(MANAGER)).status_code == 204
        assert client.get(url, headers=actor_headers(MANAGER)).status_code == 404

    def test_bad_amount(self, client, catalog):
        event = create_event_via_api(client, catalog)
        resp = _pay_via_api(client, event["event_id"], "-5")
        assert resp.status_code == 400
        assert resp.json()["error"] == "validation_error"


class TestActivityRoutes:

    def test_staff_only(self, client, catalog):
        create_event_via_api(client, catalog)
        assert client.get("/api/activity-logs/", headers=actor_headers(CLIENT)).status_code == 403

        resp = client.get("/api/activity-logs/", params={"action": "event_created"}, headers=actor_headers(ADMIN))
        assert resp.status_code == 200
        entries = resp.json()
        assert len(entries) == 1
        assert entries[0]["table_name"] == "events"

    def test_unknown_action_filter(self, client, catalog):
        resp = client.get("/api/activity-logs/", params={"action": "bogus"}, headers=actor_headers(ADMIN))
        assert resp.status_code == 400

    def test_window_too_large(self, client, catalog):
        resp = client.get("/api/activity-logs/", params={"days": 1000000000}, headers=actor_headers(ADMIN))
        assert resp.status_code == 422
