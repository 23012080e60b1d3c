"""Tests for EventRequest creation, listing and the admin lifecycle."""
from decimal import Decimal

from app.services.lifecycle import TERMINAL_STATUSES, RequestEvent, next_status
from tests.conftest import (
    REQUEST_FIELDS,
    create_test_account,
    create_test_request,
    open_to_providers,
    transition,
)


class TestCreateRequest:
    """Paid creation: charge first, then persist in pending."""

    def test_charge_endpoint(self, client):
        resp = client.get("/api/event-requests/charge")
        assert resp.status_code == 200
        assert Decimal(resp.json()["charge"]) == Decimal("50")

    def test_create_debits_balance(self, client):
        """Balance 100, charge 50 → request pending, balance 50."""
        requester = create_test_account(client, name="Requester", balance="100")
        data = create_test_request(client, requester["account_id"])
        assert data["status"] == "pending"
        assert Decimal(data["hsc_charge"]) == Decimal("50")
        assert Decimal(data["new_balance"]) == Decimal("50")

        account = client.get(f"/api/accounts/{requester['account_id']}").json()
        assert Decimal(account["hsc_balance"]) == Decimal("50")

    def test_create_persists_brief(self, client):
        requester = create_test_account(client)
        created = create_test_request(
            client, requester["account_id"], activities=["Catering", "Catering", " Lighting "]
        )
        resp = client.get(
            f"/api/event-requests/{created['request_id']}",
            params={"actor_id": requester["account_id"]},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["payment_status"] == "paid"
        assert data["event_type"] == "wedding"
        assert data["number_of_guests"] == 120
        assert data["activities"] == ["Catering", "Lighting"]
        assert data["proposal_ids"] == []

    def test_insufficient_balance(self, client):
        """Balance 30, charge 50 → insufficient_balance, nothing persisted, nothing debited."""
        requester = create_test_account(client, balance="30")
        resp = client.post("/api/event-requests/", json={
            "requester_id": requester["account_id"],
            **REQUEST_FIELDS,
        })
        assert resp.status_code == 402
        assert resp.json()["code"] == "insufficient_balance"

        mine = client.get("/api/event-requests/mine", params={"requester_id": requester["account_id"]})
        assert mine.json() == []
        account = client.get(f"/api/accounts/{requester['account_id']}").json()
        assert Decimal(account["hsc_balance"]) == Decimal("30")

    def test_unknown_requester(self, client):
        resp = client.post("/api/event-requests/", json={"requester_id": "ghost", **REQUEST_FIELDS})
        assert resp.status_code == 404
        assert resp.json()["code"] == "not_found"

    def test_other_event_type_requires_label(self, client):
        requester = create_test_account(client)
        resp = client.post("/api/event-requests/", json={
            "requester_id": requester["account_id"],
            **{**REQUEST_FIELDS, "event_type": "other"},
        })
        assert resp.status_code == 422
        assert resp.json()["code"] == "validation_error"
        assert resp.json()["fields"] == {"event_type_other": "required"}

        ok = create_test_request(
            client, requester["account_id"], event_type="other", event_type_other="Graduation party"
        )
        assert ok["status"] == "pending"

    def test_validation_leaves_balance_untouched(self, client):
        requester = create_test_account(client, balance="100")
        resp = client.post("/api/event-requests/", json={
            "requester_id": requester["account_id"],
            **{**REQUEST_FIELDS, "number_of_guests": 0, "email": "not-an-email", "full_name": "  "},
        })
        assert resp.status_code == 422
        fields = resp.json()["fields"]
        assert set(fields) == {"number_of_guests", "email", "full_name"}
        account = client.get(f"/api/accounts/{requester['account_id']}").json()
        assert Decimal(account["hsc_balance"]) == Decimal("100")

    def test_unknown_event_type(self, client):
        requester = create_test_account(client)
        resp = client.post("/api/event-requests/", json={
            "requester_id": requester["account_id"],
            **{**REQUEST_FIELDS, "event_type": "rave"},
        })
        assert resp.status_code == 422
        assert resp.json()["fields"]["event_type"] == "invalid"

    def test_malformed_body_uses_same_code(self, client):
        resp = client.post("/api/event-requests/", json={"requester_id": "x"})
        assert resp.status_code == 422
        assert resp.json()["code"] == "validation_error"


class TestMyRequests:

    def test_lists_only_own_requests(self, client):
        alice = create_test_account(client, name="Alice", balance="200")
        bob = create_test_account(client, name="Bob", balance="200")
        create_test_request(client, alice["account_id"])
        create_test_request(client, alice["account_id"])
        create_test_request(client, bob["account_id"])

        resp = client.get("/api/event-requests/mine", params={"requester_id": alice["account_id"]})
        assert resp.status_code == 200
        assert len(resp.json()) == 2
        assert all(r["requester_id"] == alice["account_id"] for r in resp.json())

    def test_status_filter(self, client):
        requester = create_test_account(client, balance="200")
        first = create_test_request(client, requester["account_id"])
        create_test_request(client, requester["account_id"])
        transition(client, first["request_id"], "review")

        resp = client.get("/api/event-requests/mine", params={
            "requester_id": requester["account_id"],
            "status": "under-review",
        })
        assert [r["request_id"] for r in resp.json()] == [first["request_id"]]

        everything = client.get("/api/event-requests/mine", params={
            "requester_id": requester["account_id"],
            "status": "all",
        })
        assert len(everything.json()) == 2

    def test_unknown_status_filter(self, client):
        requester = create_test_account(client)
        resp = client.get("/api/event-requests/mine", params={
            "requester_id": requester["account_id"],
            "status": "archived",
        })
        assert resp.status_code == 422


class TestAdminLifecycle:
    """Transition table: pending → under-review → approved | rejected | show-partners-members."""

    def test_review_then_approve(self, client):
        requester = create_test_account(client)
        req = create_test_request(client, requester["account_id"])

        resp = transition(client, req["request_id"], "review")
        assert resp.status_code == 200
        assert resp.json()["status"] == "under-review"

        resp = transition(client, req["request_id"], "approve", note="Looks good")
        assert resp.json()["status"] == "approved"

        data = client.get(
            f"/api/event-requests/{req['request_id']}", params={"actor_id": requester["account_id"]}
        ).json()
        assert data["admin_note"] == "Looks good"
        assert data["processed_by"] == "admin-1"
        assert data["processed_at"] is not None

    def test_review_then_reject(self, client):
        requester = create_test_account(client)
        req = create_test_request(client, requester["account_id"])
        transition(client, req["request_id"], "review")
        resp = transition(client, req["request_id"], "reject")
        assert resp.status_code == 200
        assert resp.json()["status"] == "rejected"
        assert resp.json()["payment_status"] == "paid"

    def test_open_to_providers(self, client):
        requester = create_test_account(client)
        req = create_test_request(client, requester["account_id"])
        open_to_providers(client, req["request_id"])

    def test_cannot_skip_review(self, client):
        requester = create_test_account(client)
        req = create_test_request(client, requester["account_id"])
        resp = transition(client, req["request_id"], "approve")
        assert resp.status_code == 409
        assert resp.json()["code"] == "invalid_transition"

    def test_repeated_transition_is_rejected(self, client):
        """Re-applying an edge is an error, not a silent no-op."""
        requester = create_test_account(client)
        req = create_test_request(client, requester["account_id"])
        assert transition(client, req["request_id"], "review").status_code == 200
        resp = transition(client, req["request_id"], "review")
        assert resp.status_code == 409
        assert resp.json()["code"] == "invalid_transition"

    def test_terminal_states_have_no_exits(self, client):
        requester = create_test_account(client)
        req = create_test_request(client, requester["account_id"])
        transition(client, req["request_id"], "review")
        transition(client, req["request_id"], "reject")
        for event in ("review", "approve", "reject", "open-to-providers"):
            assert transition(client, req["request_id"], event).status_code == 409

    def test_terminal_statuses_accept_no_event(self):
        for current in TERMINAL_STATUSES:
            for event in RequestEvent:
                assert next_status(current, event) is None

    def test_proposal_accepted_is_not_an_admin_event(self, client):
        requester = create_test_account(client)
        req = create_test_request(client, requester["account_id"])
        open_to_providers(client, req["request_id"])
        resp = transition(client, req["request_id"], "proposal-accepted")
        assert resp.status_code == 409

    def test_unknown_event(self, client):
        requester = create_test_account(client)
        req = create_test_request(client, requester["account_id"])
        resp = transition(client, req["request_id"], "archive")
        assert resp.status_code == 409
        assert resp.json()["code"] == "invalid_transition"

    def test_unknown_request(self, client):
        resp = transition(client, "missing", "review")
        assert resp.status_code == 404


class TestRequestVisibility:

    def test_provider_cannot_see_unopened_request(self, client):
        requester = create_test_account(client)
        provider = create_test_account(client, name="Provider", member_days=30)
        req = create_test_request(client, requester["account_id"])
        resp = client.get(
            f"/api/event-requests/{req['request_id']}", params={"actor_id": provider["account_id"]}
        )
        assert resp.status_code == 403

    def test_provider_sees_open_request_without_contact_details(self, client):
        requester = create_test_account(client)
        provider = create_test_account(client, name="Provider", member_days=30)
        req = create_test_request(client, requester["account_id"])
        open_to_providers(client, req["request_id"])

        resp = client.get(
            f"/api/event-requests/{req['request_id']}", params={"actor_id": provider["account_id"]}
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["proposal_count"] == 0
        assert "email" not in data
        assert "proposal_ids" not in data
