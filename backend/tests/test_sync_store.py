"""
AppStore tests, run against the real API in-process.

Verifies:
- Invoice/payment side effects on local client and invoice aggregates
- Package tag and setup step created with an invoice
- Fetch failures leave an empty collection and never raise
- Stale fetch responses are dropped
- Chat messages survive a chat list refresh
- Deleting a client clears its records locally
"""

import threading

import pytest

from sentra.sync import entities as e
from sentra.sync.adapters import Adapters
from sentra.sync.store import AppStore
from sentra.sync.transport import ApiError


class DownTransport:
    """Every request fails as if the server were unreachable."""

    def request(self, method, path, *, json=None, params=None):
        raise ApiError(None, f"{method} {path} failed: connection refused")

    def close(self):
        pass


@pytest.fixture
def offline_store():
    return AppStore(Adapters.over(DownTransport()))


@pytest.fixture
def acme_local(store):
    result = store.add_client({"name": "Alice Tan", "business_name": "Acme Sdn Bhd", "email": "alice@acme.test"})
    return result.value


# =============================================================================
# INVOICES & PAYMENTS
# =============================================================================


class TestBillingSideEffects:

    def test_invoice_then_partial_payment(self, store, acme_local):
        invoice = store.add_invoice({"client_id": acme_local.id, "package_name": "Starter", "amount": 1000})
        assert invoice.ok

        acme = store.get_client(acme_local.id)
        assert acme.total_sales == 1000
        assert acme.balance == 1000
        assert "Starter" in acme.tags
        assert any(t.name == "Starter" for t in store["tags"])
        steps = store.progress_steps_for(acme_local.id)
        assert [s.title for s in steps] == ["Starter - Package Setup"]
        assert steps[0].deadline is not None

        payment = store.add_payment({"client_id": acme_local.id, "invoice_id": invoice.value.id, "amount": 400})
        assert payment.ok

        acme = store.get_client(acme_local.id)
        assert acme.total_collection == 400
        assert acme.balance == 600
        local_invoice = store.invoices_for(acme_local.id)[0]
        assert (local_invoice.paid, local_invoice.due, local_invoice.status) == (400, 600, "Partial")

    @pytest.mark.parametrize("amounts,payments", [
        ([1000], [400]),
        ([250, 750], [250, 100, 300]),
        ([99.99], [0.99, 99]),
    ])
    def test_balance_is_sales_minus_collection(self, store, acme_local, amounts, payments):
        invoices = [
            store.add_invoice({"client_id": acme_local.id, "package_name": f"P{i}", "amount": amount}).value
            for i, amount in enumerate(amounts)
        ]
        for i, amount in enumerate(payments):
            invoice = invoices[i % len(invoices)]
            assert store.add_payment({"client_id": acme_local.id, "invoice_id": invoice.id, "amount": amount}).ok

        acme = store.get_client(acme_local.id)
        assert acme.balance == pytest.approx(acme.total_sales - acme.total_collection)
        assert store.total_balance() == pytest.approx(store.total_sales() - store.total_collection())

    def test_local_state_matches_server_after_refetch(self, store, acme_local):
        invoice = store.add_invoice({"client_id": acme_local.id, "package_name": "Growth", "amount": 1000})
        store.add_payment({"client_id": acme_local.id, "invoice_id": invoice.value.id, "amount": 400})
        local = store.get_client(acme_local.id)

        store.fetch_all()
        server = store.get_client(acme_local.id)
        assert (server.total_sales, server.total_collection, server.balance) == (
            local.total_sales, local.total_collection, local.balance,
        )
        assert server.tags == ["Growth"]

    def test_second_invoice_reuses_tag(self, store, acme_local):
        store.add_invoice({"client_id": acme_local.id, "package_name": "Starter", "amount": 100})
        store.add_invoice({"client_id": acme_local.id, "package_name": "starter", "amount": 100})

        assert len([t for t in store["tags"] if t.name.lower() == "starter"]) == 1
        assert store.get_client(acme_local.id).invoice_count == 2

    def test_delete_payment_reverses(self, store, acme_local):
        invoice = store.add_invoice({"client_id": acme_local.id, "package_name": "Starter", "amount": 1000}).value
        payment = store.add_payment({"client_id": acme_local.id, "invoice_id": invoice.id, "amount": 400}).value

        assert store.delete_payment(payment.id).ok

        assert store.get_client(acme_local.id).balance == 1000
        assert store.invoices_for(acme_local.id)[0].status == "Pending"
        assert store.payments_for(acme_local.id) == []

    def test_rejected_payment_is_a_failure_result(self, store, acme_local):
        result = store.add_payment({"client_id": acme_local.id, "invoice_id": "INV-NOPE", "amount": 10})
        assert not result
        assert "Invoice not found" in result.error

    def test_optimistic_invoice_when_offline(self, offline_store):
        result = offline_store.add_invoice(
            {"client_id": 7, "package_name": "Starter", "amount": 500}, optimistic=True,
        )

        assert result.ok is False
        assert result.value.id.startswith("INV-")
        assert result.value.due == 500
        assert offline_store["invoices"] == [result.value]
        assert offline_store["tags"][0].id.startswith("TAG-")
        assert offline_store["progress_steps"][0].id.startswith("STEP-")

    def test_offline_invoice_without_fallback_changes_nothing(self, offline_store):
        result = offline_store.add_invoice({"client_id": 7, "package_name": "Starter", "amount": 500})
        assert result.ok is False
        assert result.value is None
        assert offline_store["invoices"] == []


# =============================================================================
# FETCHING
# =============================================================================


class TestFetching:

    def test_failed_fetch_empties_collection(self, offline_store):
        offline_store.collections = {**offline_store.collections, "clients": [e.Client(id=1, name="Old")]}

        offline_store.fetch_clients()

        assert offline_store["clients"] == []
        assert offline_store.loading["clients"] is False

    def test_fetch_all_never_raises_when_offline(self, offline_store):
        offline_store.select_client(3)
        offline_store.fetch_all()
        assert all(offline_store[name] == [] for name in offline_store.collections)
        assert not any(offline_store.loading.values())

    def test_stale_response_is_discarded(self, offline_store):
        entered = threading.Event()
        release = threading.Event()

        class RacingClients:
            calls = 0

            def get_all(self, **params):
                RacingClients.calls += 1
                if RacingClients.calls == 1:
                    entered.set()
                    release.wait(5)
                    return [e.Client(id=1, name="stale")]
                return [e.Client(id=1, name="fresh")]

        offline_store._adapters.clients = RacingClients()

        slow = threading.Thread(target=offline_store.fetch_clients)
        slow.start()
        assert entered.wait(5)
        offline_store.fetch_clients()
        release.set()
        slow.join(5)

        assert [c.name for c in offline_store["clients"]] == ["fresh"]
        assert offline_store.loading["clients"] is False

    def test_link_fetches_for_different_clients_do_not_collide(self, offline_store):
        entered = threading.Event()
        release = threading.Event()

        class SlowFirstLinks:
            def get_all(self, client_id=None):
                if client_id == 1:
                    entered.set()
                    release.wait(5)
                return [e.ClientLink(id=f"L{client_id}", client_id=client_id, title="Drive")]

        offline_store._adapters.client_links = SlowFirstLinks()

        slow = threading.Thread(target=offline_store.fetch_client_links, args=(1,))
        slow.start()
        assert entered.wait(5)
        offline_store.fetch_client_links(2)
        release.set()
        slow.join(5)

        assert [l.id for l in offline_store.links_for(1)] == ["L1"]
        assert [l.id for l in offline_store.links_for(2)] == ["L2"]
        assert offline_store.loading["client_links"] is False

    def test_chat_messages_survive_list_refresh(self, store, acme_local):
        chat = store.create_chat(acme_local.id).value
        store.send_message(chat.id, "hello", sender="client")
        store.fetch_chat_messages(chat.id)
        assert [m.content for m in store.chat_for(acme_local.id).messages] == ["hello"]

        store.fetch_chats()

        refreshed = store.chat_for(acme_local.id)
        assert [m.content for m in refreshed.messages] == ["hello"]
        assert refreshed.unread_count == 1

    def test_refresh_live_data_loads_selected_links(self, store, acme_local):
        store.add_client_link(acme_local.id, "Drive", "https://drive.test")
        store.collections = {**store.collections, "client_links": []}
        store.select_client(acme_local.id)

        store.refresh_live_data()

        assert [l.title for l in store.links_for(acme_local.id)] == ["Drive"]


# =============================================================================
# OTHER MUTATIONS
# =============================================================================


class TestMutations:

    def test_client_errors_propagate(self, store):
        with pytest.raises(ApiError) as exc:
            store.add_client({"name": "No Email"})
        assert exc.value.status_code == 400

    def test_delete_client_cascades_locally(self, store, acme_local):
        bob = store.add_client({"name": "Bob", "business_name": "Bob Co", "email": "bob@bob.test"}).value
        for owner in (acme_local, bob):
            invoice = store.add_invoice({"client_id": owner.id, "package_name": "Starter", "amount": 100}).value
            store.add_payment({"client_id": owner.id, "invoice_id": invoice.id, "amount": 50})
            store.create_chat(owner.id)
            store.add_client_link(owner.id, "Drive", "https://drive.test")
            store.add_calendar_event({
                "client_id": owner.id, "title": "Kickoff", "start_date": "2026-10-20", "start_time": "10:00",
            })
        store.select_client(acme_local.id)

        store.delete_client(acme_local.id)

        assert store.get_client(bob.id) is not None
        assert len(store.invoices_for(bob.id)) == 1
        assert len(store.payments_for(bob.id)) == 1
        assert store.chat_for(bob.id) is not None
        assert len(store.links_for(bob.id)) == 1
        assert len(store.events_for(bob.id)) == 1
        assert store.links_for(acme_local.id) == []
        assert store.events_for(acme_local.id) == []

        assert store.get_client(acme_local.id) is None
        assert store.invoices_for(acme_local.id) == []
        assert store.payments_for(acme_local.id) == []
        assert store.progress_steps_for(acme_local.id) == []
        assert store.chat_for(acme_local.id) is None
        assert store.selected_client_id is None

    def test_unread_count_empty(self, offline_store):
        assert offline_store.unread_messages_count() == 0
        assert offline_store.total_balance() == 0

    def test_mark_chat_read(self, store, acme_local):
        chat = store.create_chat(acme_local.id).value
        store.send_message(chat.id, "ping", sender="client")
        assert store.unread_messages_count() == 1

        assert store.mark_chat_read(chat.id).ok
        assert store.unread_messages_count() == 0

    def test_step_update_is_local_only(self, store, acme_local):
        step = store.add_progress_step({"client_id": acme_local.id, "title": "Brief"}).value

        result = store.update_progress_step(step.id, {"completed": True})

        assert result.value.completed is True
        assert result.value.completed_date is not None
        store.fetch_progress_steps()
        assert store.progress_steps_for(acme_local.id)[0].completed is False

    def test_component_brings_its_step(self, store, acme_local):
        store.add_component({"client_id": acme_local.id, "name": "SEO"})
        assert [s.title for s in store.progress_steps_for(acme_local.id)] == ["SEO"]

    def test_delete_tag_strips_clients(self, store, acme_local):
        tag = store.add_tag("VIP").value
        store.update_client(acme_local.id, {"tags": ["VIP"]})

        assert store.delete_tag(tag.id).ok
        assert store.get_client(acme_local.id).tags == []

    def test_update_missing_event(self, store):
        assert store.update_calendar_event("EVT-missing", {"title": "x"}).ok is False

    def test_event_edit_ignores_read_only_keys(self, offline_store):
        offline_store.collections = {
            **offline_store.collections,
            "calendar_events": [e.CalendarEvent(id="E1", title="Kickoff", updated_at="2026-01-01T00:00:00Z")],
        }

        result = offline_store.update_calendar_event(
            "E1", {"id": "E9", "title": "Review", "updated_at": "2020-01-01T00:00:00Z"},
        )

        assert result.ok
        assert result.value.id == "E1"
        assert result.value.title == "Review"
        assert result.value.updated_at != "2020-01-01T00:00:00Z"
        assert offline_store["calendar_events"] == [result.value]

    def test_unknown_field_is_a_failure_result(self, offline_store):
        step = e.ProgressStep(id="S1", client_id=1, title="Brief")
        offline_store.collections = {**offline_store.collections, "progress_steps": [step]}

        result = offline_store.update_progress_step("S1", {"colour": "red"})

        assert result.ok is False
        assert "colour" in result.error
        assert offline_store["progress_steps"] == [step]

    def test_step_round_trips_its_own_record(self, store, acme_local):
        step = store.add_progress_step({"client_id": acme_local.id, "title": "Brief"}).value

        result = store.update_progress_step(step.id, {**step.to_record(), "updated_at": step.updated_at})

        assert result.ok
        assert result.value.title == "Brief"
