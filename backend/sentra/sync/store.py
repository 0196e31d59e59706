# Overview: Client-side application store: one container for every collection, mutated through a single locked patch funnel.

"""
Application store.

State lives in plain lists keyed by collection name. Every change goes
through `_apply(patch)`: the patch receives the current collections and
returns the lists to install, so readers always see whole lists and
never a half-applied change.

Fetches:
- replace a collection wholesale; a failed fetch leaves it empty
- never raise; errors are logged
- carry a per-collection sequence number, and a response older than the
  last one applied is dropped

Mutations call the API first and patch local state from the response.
Client and user mutations re-raise ApiError; every other mutation returns
a Result. Invoice and payment side effects on client/invoice aggregates
are mirrored locally with the same arithmetic the API uses.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import fields
from typing import Callable, Optional

from sentra import accounting
from sentra.ids import time_based_id
from sentra.time_utils import utcnow, days_from_now, to_utc_z

from . import entities as e
from .adapters import Adapters
from .result import Result
from .transport import ApiError

logger = logging.getLogger(__name__)


COLLECTIONS = (
    "clients",
    "invoices",
    "payments",
    "calendar_events",
    "components",
    "progress_steps",
    "chats",
    "users",
    "tags",
    "client_links",
    "add_on_services",
    "service_requests",
)

# Collections whose records carry client_id and go away with their client
CLIENT_OWNED = (
    "invoices",
    "payments",
    "calendar_events",
    "components",
    "progress_steps",
    "chats",
    "client_links",
    "service_requests",
)

PACKAGE_STEP_DEADLINE_DAYS = 7


def package_step_title(package_name: str) -> str:
    return f"{package_name} - Package Setup"


def _now() -> str:
    return to_utc_z(utcnow())


def _as(cls, data):
    return data if isinstance(data, cls) else cls.from_record(dict(data or {}))


def _replace(items: list, record) -> list:
    return [record if item.id == record.id else item for item in items]


def _find(items: list, record_id):
    return next((item for item in items if item.id == record_id), None)


def _local_edit(record, changes: dict) -> dict:
    """
    Keep the editable fields of changes; id and read-only keys are dropped.

    Raises ValueError naming any key the record does not have.
    """
    names = {f.name for f in fields(record)}
    unknown = sorted(k for k in changes if k not in names)
    if unknown:
        raise ValueError(f"Unknown field(s): {', '.join(unknown)}")
    return {k: v for k, v in changes.items() if k != "id" and k not in record.READ_ONLY}


def _client_totals(client: e.Client) -> accounting.ClientTotals:
    return accounting.ClientTotals(
        total_sales=client.total_sales,
        total_collection=client.total_collection,
        balance=client.balance,
        invoice_count=client.invoice_count,
    )


def _with_totals(client: e.Client, totals: accounting.ClientTotals) -> e.Client:
    return client.copy(
        total_sales=totals.total_sales,
        total_collection=totals.total_collection,
        balance=totals.balance,
        invoice_count=totals.invoice_count,
        last_activity=_now(),
    )


def _adjust_client(clients: list, client_id, rule: Callable) -> list:
    """Apply an accounting rule to one client's totals (no-op when the client is unknown)."""
    return [
        _with_totals(c, rule(_client_totals(c))) if c.id == client_id else c
        for c in clients
    ]


def _apply_payment(collections: dict, client_id, invoice_id, amount: float) -> dict:
    """Invoice paid/due/status and client collection/balance after a payment (negative reverses)."""
    invoices = []
    for inv in collections["invoices"]:
        if inv.id == invoice_id:
            totals = accounting.invoice_after_payment(inv.amount, inv.paid, amount)
            inv = inv.copy(paid=totals.paid, due=totals.due, status=totals.status)
        invoices.append(inv)
    clients = _adjust_client(
        collections["clients"], client_id, lambda t: accounting.client_after_payment(t, amount)
    )
    return {"invoices": invoices, "clients": clients}


def _merge_chats(current: list, fresh: list) -> list:
    """Keep already-loaded messages for chats whose fresh record carries none."""
    loaded = {chat.id: chat.messages for chat in current}
    return [
        chat if chat.messages is not None else chat.copy(messages=loaded.get(chat.id))
        for chat in fresh
    ]


class AppStore:
    def __init__(self, adapters: Adapters):
        self._adapters = adapters
        self._lock = threading.RLock()

        self.collections: dict[str, list] = {name: [] for name in COLLECTIONS}
        self.loading: dict[str, bool] = {name: False for name in COLLECTIONS}
        self.user: Optional[e.AuthUser] = None
        self.selected_client_id: Optional[int] = None

        # Fetch sequence numbers: last issued / last applied, per fetch key
        self._issued: dict[str, int] = defaultdict(int)
        self._applied: dict[str, int] = defaultdict(int)

    # =========================================================================
    # STATE FUNNEL
    # =========================================================================

    def _apply(self, patch: Callable[[dict], Optional[dict]]) -> None:
        """Run patch against the current collections and install the lists it returns."""
        with self._lock:
            changes = patch(self.collections)
            if changes:
                self.collections = {**self.collections, **changes}

    def _set_loading(self, name: str, value: bool) -> None:
        with self._lock:
            self.loading = {**self.loading, name: value}

    def _begin_fetch(self, key: str) -> int:
        with self._lock:
            self._issued[key] += 1
            return self._issued[key]

    def _accept(self, key: str, seq: int) -> bool:
        """Mark seq applied unless a newer response for key already landed (caller holds the lock)."""
        if seq < self._applied[key]:
            logger.debug("Discarding stale %s response (seq %s < %s)", key, seq, self._applied[key])
            return False
        self._applied[key] = seq
        return True

    def __getitem__(self, name: str) -> list:
        return self.collections[name]

    def set_user(self, user: Optional[e.AuthUser]) -> None:
        with self._lock:
            self.user = user

    def select_client(self, client_id: Optional[int]) -> None:
        with self._lock:
            self.selected_client_id = client_id

    # =========================================================================
    # FETCHING
    # =========================================================================

    def _fetch(self, name: str, load: Callable[[], list], merge: Optional[Callable] = None,
               key: Optional[str] = None) -> None:
        """Load collection name; key scopes the sequence number when the fetch covers a subset."""
        key = key or name
        seq = self._begin_fetch(key)
        self._set_loading(name, True)
        try:
            try:
                records = load()
            except Exception:
                logger.exception("Failed to fetch %s", name)
                records = []

            with self._lock:
                if self._accept(key, seq):
                    self._apply(lambda c: {name: merge(c[name], records) if merge else records})
        finally:
            with self._lock:
                # An older response finishing late leaves the flag to the newest fetch
                if seq == self._issued[key]:
                    self.loading = {**self.loading, name: False}

    def fetch_clients(self) -> None:
        self._fetch("clients", self._adapters.clients.get_all)

    def fetch_invoices(self) -> None:
        self._fetch("invoices", self._adapters.invoices.get_all)

    def fetch_payments(self) -> None:
        self._fetch("payments", self._adapters.payments.get_all)

    def fetch_calendar_events(self) -> None:
        self._fetch("calendar_events", self._adapters.calendar_events.get_all)

    def fetch_components(self) -> None:
        self._fetch("components", self._adapters.components.get_all)

    def fetch_progress_steps(self) -> None:
        self._fetch("progress_steps", self._adapters.progress_steps.get_all)

    def fetch_users(self) -> None:
        self._fetch("users", self._adapters.users.get_all)

    def fetch_tags(self) -> None:
        self._fetch("tags", self._adapters.tags.get_all)

    def fetch_add_on_services(self) -> None:
        self._fetch("add_on_services", self._adapters.add_on_services.get_all)

    def fetch_service_requests(self) -> None:
        self._fetch("service_requests", self._adapters.service_requests.get_all)

    def fetch_chats(self) -> None:
        self._fetch("chats", self._adapters.chats.get_all, merge=_merge_chats)

    def fetch_client_links(self, client_id: int) -> None:
        """Reload one client's links; other clients' links are kept."""
        def merge(current, fresh):
            return [link for link in current if link.client_id != client_id] + fresh

        self._fetch(
            "client_links",
            lambda: self._adapters.client_links.get_all(client_id=client_id),
            merge=merge,
            key=f"client_links:{client_id}",
        )

    def fetch_chat_messages(self, chat_id: int) -> None:
        key = f"chat_messages:{chat_id}"
        seq = self._begin_fetch(key)
        try:
            messages = self._adapters.chats.get_messages(chat_id)
        except Exception:
            logger.exception("Failed to fetch messages for chat %s", chat_id)
            return

        with self._lock:
            if self._accept(key, seq):
                self._apply(lambda c: {
                    "chats": [
                        chat.copy(messages=messages) if chat.id == chat_id else chat
                        for chat in c["chats"]
                    ]
                })

    def fetch_all(self) -> None:
        self.fetch_clients()
        self.fetch_invoices()
        self.fetch_payments()
        self.fetch_calendar_events()
        self.fetch_components()
        self.fetch_progress_steps()
        self.fetch_users()
        self.fetch_tags()
        self.fetch_add_on_services()
        self.fetch_service_requests()
        self.fetch_chats()
        if self.selected_client_id is not None:
            self.fetch_client_links(self.selected_client_id)

    def refresh_live_data(self) -> None:
        """
        One polling pass: chats, then messages of every chat, then clients,
        invoices, payments, users and the selected client's links.
        """
        self.fetch_chats()
        for chat in list(self.collections["chats"]):
            self.fetch_chat_messages(chat.id)
        self.fetch_clients()
        self.fetch_invoices()
        self.fetch_payments()
        self.fetch_users()
        selected = self.selected_client_id
        if selected is not None:
            self.fetch_client_links(selected)

    # =========================================================================
    # CLIENTS (errors propagate)
    # =========================================================================

    def add_client(self, data) -> Result:
        client = self._adapters.clients.create(data)
        self._apply(lambda c: {"clients": [client] + c["clients"]})
        return Result.success(client)

    def update_client(self, client_id: int, changes: dict) -> Result:
        client = self._adapters.clients.update(client_id, changes)
        self._apply(lambda c: {"clients": _replace(c["clients"], client)})
        return Result.success(client)

    def delete_client(self, client_id: int) -> Result:
        """Delete remotely, then drop the client and everything it owns from local state."""
        self._adapters.clients.delete(client_id)

        def cascade(c):
            changes = {"clients": [x for x in c["clients"] if x.id != client_id]}
            for name in CLIENT_OWNED:
                changes[name] = [x for x in c[name] if x.client_id != client_id]
            return changes

        self._apply(cascade)
        with self._lock:
            if self.selected_client_id == client_id:
                self.selected_client_id = None
        return Result.success(client_id)

    # =========================================================================
    # INVOICES
    # =========================================================================

    def add_invoice(self, data, optimistic: bool = False) -> Result:
        """
        Create an invoice, then locally: add it to the client's totals,
        make sure a tag named after the package exists and is on the
        client, and add a "<package> - Package Setup" step due in 7 days.

        With optimistic=True a failed create still applies all of that to
        a local record ("INV-<ms>-...") and returns it in a failure Result.
        """
        try:
            invoice = self._adapters.invoices.create(data)
        except ApiError as err:
            logger.warning("Failed to create invoice: %s", err)
            if not optimistic:
                return Result.failure(str(err))
            invoice = self._local_invoice(_as(e.Invoice, data))
            self._after_invoice_created(invoice, remote=False)
            return Result.failure(str(err), value=invoice)

        self._after_invoice_created(invoice, remote=True)
        return Result.success(invoice)

    def _local_invoice(self, draft: e.Invoice) -> e.Invoice:
        totals = accounting.invoice_after_amount_change(draft.amount, draft.paid)
        return draft.copy(
            id=time_based_id("INV"),
            paid=totals.paid,
            due=totals.due,
            status=totals.status,
            created_at=_now(),
            updated_at=_now(),
        )

    def _after_invoice_created(self, invoice: e.Invoice, remote: bool) -> None:
        self._apply(lambda c: {
            "invoices": [invoice] + c["invoices"],
            "clients": _adjust_client(
                c["clients"], invoice.client_id,
                lambda t: accounting.client_after_invoice(t, invoice.amount),
            ),
        })
        self._ensure_package_tag(invoice.client_id, invoice.package_name, remote)
        self._add_package_step(invoice.client_id, invoice.package_name, remote)

    def _ensure_package_tag(self, client_id: int, package_name: str, remote: bool) -> None:
        name = (package_name or "").strip()
        if not name:
            return

        tag = next((t for t in self.collections["tags"] if t.name.lower() == name.lower()), None)
        if tag is None:
            if remote:
                tag = self._remote_tag(name)
            if tag is None:
                tag = e.Tag(id=time_based_id("TAG"), name=name, created_at=_now())
            self._apply(lambda c: {"tags": c["tags"] + [tag]})
        # Clients carry the tag's own spelling
        name = tag.name

        client = _find(self.collections["clients"], client_id)
        if client is None or name in client.tags:
            return
        new_tags = list(client.tags) + [name]
        if remote:
            try:
                self._adapters.clients.update(client_id, {"tags": new_tags})
            except ApiError as err:
                logger.warning("Failed to tag client %s with %s: %s", client_id, name, err)
        self._apply(lambda c: {
            "clients": [x.copy(tags=new_tags) if x.id == client_id else x for x in c["clients"]]
        })

    def _remote_tag(self, name: str) -> Optional[e.Tag]:
        """Create the tag, or look it up when the API already has one by that name."""
        try:
            return self._adapters.tags.create({"name": name})
        except ApiError as err:
            if err.status_code != 409:
                logger.warning("Failed to create tag %s: %s", name, err)
                return None
        try:
            existing = self._adapters.tags.get_all()
        except ApiError as err:
            logger.warning("Failed to load tags: %s", err)
            return None
        return next((t for t in existing if t.name.lower() == name.lower()), None)

    def _add_package_step(self, client_id: int, package_name: str, remote: bool) -> None:
        draft = e.ProgressStep(
            client_id=client_id,
            title=package_step_title(package_name),
            description=f"Initial setup for the {package_name} package",
            deadline=to_utc_z(days_from_now(PACKAGE_STEP_DEADLINE_DAYS)),
        )
        step = None
        if remote:
            try:
                step = self._adapters.progress_steps.create(draft)
            except ApiError as err:
                logger.warning("Failed to create package step for client %s: %s", client_id, err)
        if step is None:
            step = draft.copy(id=time_based_id("STEP"), created_at=_now(), updated_at=_now())
        self._apply(lambda c: {"progress_steps": c["progress_steps"] + [step]})

    def update_invoice(self, invoice_id: str, changes: dict) -> Result:
        try:
            invoice = self._adapters.invoices.update(invoice_id, changes)
        except ApiError as err:
            logger.warning("Failed to update invoice %s: %s", invoice_id, err)
            return Result.failure(str(err))

        def patch(c):
            old = _find(c["invoices"], invoice_id)
            delta = round(invoice.amount - old.amount, 2) if old else 0
            clients = c["clients"]
            if delta:
                clients = _adjust_client(
                    clients, invoice.client_id,
                    lambda t: accounting.client_after_invoice_amount_change(t, delta),
                )
            return {"invoices": _replace(c["invoices"], invoice), "clients": clients}

        self._apply(patch)
        return Result.success(invoice)

    def delete_invoice(self, invoice_id: str) -> Result:
        try:
            self._adapters.invoices.delete(invoice_id)
        except ApiError as err:
            logger.warning("Failed to delete invoice %s: %s", invoice_id, err)
            return Result.failure(str(err))

        def patch(c):
            invoice = _find(c["invoices"], invoice_id)
            if invoice is None:
                return None
            return {
                "invoices": [x for x in c["invoices"] if x.id != invoice_id],
                "payments": [p for p in c["payments"] if p.invoice_id != invoice_id],
                "clients": _adjust_client(
                    c["clients"], invoice.client_id,
                    lambda t: accounting.client_after_invoice_removed(t, invoice.amount, invoice.due),
                ),
            }

        self._apply(patch)
        return Result.success(invoice_id)

    # =========================================================================
    # PAYMENTS
    # =========================================================================

    def add_payment(self, data, optimistic: bool = False) -> Result:
        """
        Record a payment, then locally: invoice paid += amount, due and
        status recomputed; client total_collection += amount and balance
        reduced (never below zero).
        """
        try:
            payment = self._adapters.payments.create(data)
        except ApiError as err:
            logger.warning("Failed to record payment: %s", err)
            if not optimistic:
                return Result.failure(str(err))
            payment = _as(e.Payment, data).copy(
                id=time_based_id("PAY"), paid_at=_now(), created_at=_now(), updated_at=_now()
            )
            self._after_payment_recorded(payment)
            return Result.failure(str(err), value=payment)

        self._after_payment_recorded(payment)
        return Result.success(payment)

    def _after_payment_recorded(self, payment: e.Payment) -> None:
        def patch(c):
            changes = _apply_payment(c, payment.client_id, payment.invoice_id, payment.amount)
            changes["payments"] = [payment] + c["payments"]
            return changes

        self._apply(patch)

    def update_payment(self, payment_id: str, changes: dict) -> Result:
        try:
            payment = self._adapters.payments.update(payment_id, changes)
        except ApiError as err:
            logger.warning("Failed to update payment %s: %s", payment_id, err)
            return Result.failure(str(err))

        def patch(c):
            old = _find(c["payments"], payment_id)
            delta = round(payment.amount - old.amount, 2) if old else 0
            out = _apply_payment(c, payment.client_id, payment.invoice_id, delta) if delta else {}
            out["payments"] = _replace(c["payments"], payment)
            return out

        self._apply(patch)
        return Result.success(payment)

    def delete_payment(self, payment_id: str) -> Result:
        try:
            self._adapters.payments.delete(payment_id)
        except ApiError as err:
            logger.warning("Failed to delete payment %s: %s", payment_id, err)
            return Result.failure(str(err))

        def patch(c):
            payment = _find(c["payments"], payment_id)
            if payment is None:
                return None
            out = _apply_payment(c, payment.client_id, payment.invoice_id, -payment.amount)
            out["payments"] = [p for p in c["payments"] if p.id != payment_id]
            return out

        self._apply(patch)
        return Result.success(payment_id)

    # =========================================================================
    # CALENDAR EVENTS
    # =========================================================================

    def add_calendar_event(self, data, optimistic: bool = False) -> Result:
        try:
            event = self._adapters.calendar_events.create(data)
        except ApiError as err:
            logger.warning("Failed to create calendar event: %s", err)
            if not optimistic:
                return Result.failure(str(err))
            event = _as(e.CalendarEvent, data).copy(id=time_based_id("EVT"), created_at=_now(), updated_at=_now())
            self._apply(lambda c: {"calendar_events": c["calendar_events"] + [event]})
            return Result.failure(str(err), value=event)

        self._apply(lambda c: {"calendar_events": c["calendar_events"] + [event]})
        return Result.success(event)

    def update_calendar_event(self, event_id: str, changes: dict) -> Result:
        """Local-only edit stamped with updated_at; the next full fetch replaces it."""
        event = _find(self.collections["calendar_events"], event_id)
        if event is None:
            return Result.failure("Calendar event not found")
        try:
            changes = _local_edit(event, changes)
        except ValueError as err:
            return Result.failure(str(err), value=event)
        updated = event.copy(**changes, updated_at=_now())
        self._apply(lambda c: {"calendar_events": _replace(c["calendar_events"], updated)})
        return Result.success(updated)

    def delete_calendar_event(self, event_id: str) -> Result:
        try:
            self._adapters.calendar_events.delete(event_id)
        except ApiError as err:
            logger.warning("Failed to delete calendar event %s: %s", event_id, err)
            return Result.failure(str(err))
        self._apply(lambda c: {"calendar_events": [x for x in c["calendar_events"] if x.id != event_id]})
        return Result.success(event_id)

    # =========================================================================
    # COMPONENTS & PROGRESS STEPS
    # =========================================================================

    def add_component(self, data) -> Result:
        """The API creates a matching progress step; this client's steps are reloaded to pick it up."""
        try:
            component = self._adapters.components.create(data)
        except ApiError as err:
            logger.warning("Failed to create component: %s", err)
            return Result.failure(str(err))
        self._apply(lambda c: {"components": c["components"] + [component]})
        self._reload_client_steps(component.client_id)
        return Result.success(component)

    def _reload_client_steps(self, client_id: int) -> None:
        try:
            steps = self._adapters.progress_steps.get_all(client_id=client_id)
        except ApiError as err:
            logger.warning("Failed to reload progress steps for client %s: %s", client_id, err)
            return
        self._apply(lambda c: {
            "progress_steps": [s for s in c["progress_steps"] if s.client_id != client_id] + steps
        })

    def update_component(self, component_id: str, changes: dict) -> Result:
        try:
            component = self._adapters.components.update(component_id, changes)
        except ApiError as err:
            logger.warning("Failed to update component %s: %s", component_id, err)
            return Result.failure(str(err))
        self._apply(lambda c: {"components": _replace(c["components"], component)})
        return Result.success(component)

    def delete_component(self, component_id: str) -> Result:
        try:
            self._adapters.components.delete(component_id)
        except ApiError as err:
            logger.warning("Failed to delete component %s: %s", component_id, err)
            return Result.failure(str(err))
        self._apply(lambda c: {"components": [x for x in c["components"] if x.id != component_id]})
        return Result.success(component_id)

    def copy_components_to_progress_steps(self, client_id: int) -> Result:
        try:
            created = self._adapters.components.copy_to_progress_steps(client_id)
        except ApiError as err:
            logger.warning("Failed to copy components for client %s: %s", client_id, err)
            return Result.failure(str(err))
        self._apply(lambda c: {"progress_steps": c["progress_steps"] + created})
        return Result.success(created)

    def add_progress_step(self, data, optimistic: bool = False) -> Result:
        try:
            step = self._adapters.progress_steps.create(data)
        except ApiError as err:
            logger.warning("Failed to create progress step: %s", err)
            if not optimistic:
                return Result.failure(str(err))
            step = _as(e.ProgressStep, data).copy(id=time_based_id("STEP"), created_at=_now(), updated_at=_now())
            self._apply(lambda c: {"progress_steps": c["progress_steps"] + [step]})
            return Result.failure(str(err), value=step)

        self._apply(lambda c: {"progress_steps": c["progress_steps"] + [step]})
        return Result.success(step)

    def update_progress_step(self, step_id: str, changes: dict) -> Result:
        """Local-only edit stamped with updated_at; completing a step stamps completed_date."""
        step = _find(self.collections["progress_steps"], step_id)
        if step is None:
            return Result.failure("Progress step not found")
        try:
            changes = _local_edit(step, changes)
        except ValueError as err:
            return Result.failure(str(err), value=step)
        if changes.get("completed") and not step.completed:
            changes.setdefault("completed_date", _now())
        elif changes.get("completed") is False:
            changes["completed_date"] = None
        updated = step.copy(**changes, updated_at=_now())
        self._apply(lambda c: {"progress_steps": _replace(c["progress_steps"], updated)})
        return Result.success(updated)

    def delete_progress_step(self, step_id: str) -> Result:
        try:
            self._adapters.progress_steps.delete(step_id)
        except ApiError as err:
            logger.warning("Failed to delete progress step %s: %s", step_id, err)
            return Result.failure(str(err))
        self._apply(lambda c: {"progress_steps": [x for x in c["progress_steps"] if x.id != step_id]})
        return Result.success(step_id)

    def add_step_comment(self, step_id: str, text: str, username: str,
                         attachment_url: Optional[str] = None, attachment_type: Optional[str] = None) -> Result:
        payload = {"text": text, "username": username}
        if attachment_url:
            payload.update(attachment_url=attachment_url, attachment_type=attachment_type)
        try:
            comment = self._adapters.progress_steps.add_comment(step_id, payload)
        except ApiError as err:
            logger.warning("Failed to add comment to step %s: %s", step_id, err)
            return Result.failure(str(err))

        self._apply(lambda c: {
            "progress_steps": [
                s.copy(comments=list(s.comments) + [comment]) if s.id == step_id else s
                for s in c["progress_steps"]
            ]
        })
        return Result.success(comment)

    def delete_step_comment(self, step_id: str, comment_id: str) -> Result:
        try:
            self._adapters.progress_steps.delete_comment(comment_id)
        except ApiError as err:
            logger.warning("Failed to delete comment %s: %s", comment_id, err)
            return Result.failure(str(err))

        self._apply(lambda c: {
            "progress_steps": [
                s.copy(comments=[x for x in s.comments if x.get("id") != comment_id]) if s.id == step_id else s
                for s in c["progress_steps"]
            ]
        })
        return Result.success(comment_id)

    # =========================================================================
    # CHATS
    # =========================================================================

    def create_chat(self, client_id: int) -> Result:
        try:
            chat = self._adapters.chats.create_chat(client_id)
        except ApiError as err:
            logger.warning("Failed to create chat for client %s: %s", client_id, err)
            return Result.failure(str(err))
        self._apply(lambda c: {"chats": [chat] + c["chats"]})
        return Result.success(chat)

    def send_message(self, chat_id: int, content: str, sender: str = "admin",
                     attachment_url: Optional[str] = None, attachment_type: Optional[str] = None) -> Result:
        draft = e.ChatMessage(
            chat_id=chat_id,
            sender=sender,
            content=content,
            message_type="file" if attachment_url else "text",
            attachment_url=attachment_url,
            attachment_type=attachment_type,
        )
        try:
            message = self._adapters.chats.send_message(chat_id, draft)
        except ApiError as err:
            logger.warning("Failed to send message to chat %s: %s", chat_id, err)
            return Result.failure(str(err))

        def patch(c):
            chats = []
            for chat in c["chats"]:
                if chat.id == chat_id:
                    chat = chat.copy(
                        messages=None if chat.messages is None else list(chat.messages) + [message],
                        last_message=message.content,
                        last_message_at=message.created_at or _now(),
                        unread_count=chat.unread_count + (1 if message.sender == "client" else 0),
                    )
                chats.append(chat)
            return {"chats": chats}

        self._apply(patch)
        return Result.success(message)

    def mark_chat_read(self, chat_id: int) -> Result:
        try:
            self._adapters.chats.mark_as_read(chat_id)
        except ApiError as err:
            logger.warning("Failed to mark chat %s as read: %s", chat_id, err)
            return Result.failure(str(err))
        self._apply(lambda c: {
            "chats": [chat.copy(unread_count=0) if chat.id == chat_id else chat for chat in c["chats"]]
        })
        return Result.success(chat_id)

    def set_chat_online(self, chat_id: int, online: bool) -> Result:
        try:
            chat = self._adapters.chats.update_online_status(chat_id, online)
        except ApiError as err:
            logger.warning("Failed to update online status of chat %s: %s", chat_id, err)
            return Result.failure(str(err))
        self._apply(lambda c: {
            "chats": [x.copy(online=chat.online) if x.id == chat_id else x for x in c["chats"]]
        })
        return Result.success(chat)

    def delete_message(self, chat_id: int, message_id: int) -> Result:
        try:
            self._adapters.chats.delete_message(message_id)
        except ApiError as err:
            logger.warning("Failed to delete message %s: %s", message_id, err)
            return Result.failure(str(err))
        self._apply(lambda c: {
            "chats": [
                chat.copy(messages=[m for m in chat.messages if m.id != message_id])
                if chat.id == chat_id and chat.messages is not None else chat
                for chat in c["chats"]
            ]
        })
        return Result.success(message_id)

    # =========================================================================
    # USERS (errors propagate)
    # =========================================================================

    def add_user(self, data) -> Result:
        user = self._adapters.users.create(data)
        self._apply(lambda c: {"users": [user] + c["users"]})
        return Result.success(user)

    def update_user(self, user_id: str, changes: dict) -> Result:
        user = self._adapters.users.update(user_id, changes)
        self._apply(lambda c: {"users": _replace(c["users"], user)})
        return Result.success(user)

    def delete_user(self, user_id: str) -> Result:
        self._adapters.users.delete(user_id)
        self._apply(lambda c: {"users": [u for u in c["users"] if u.id != user_id]})
        return Result.success(user_id)

    # =========================================================================
    # TAGS & CLIENT LINKS
    # =========================================================================

    def add_tag(self, name: str, color: Optional[str] = None) -> Result:
        payload = {"name": name}
        if color:
            payload["color"] = color
        try:
            tag = self._adapters.tags.create(payload)
        except ApiError as err:
            logger.warning("Failed to create tag %s: %s", name, err)
            return Result.failure(str(err))
        self._apply(lambda c: {"tags": c["tags"] + [tag]})
        return Result.success(tag)

    def delete_tag(self, tag_id: str) -> Result:
        """Remove the tag and strip its name from every client."""
        tag = _find(self.collections["tags"], tag_id)
        try:
            self._adapters.tags.delete(tag_id)
        except ApiError as err:
            logger.warning("Failed to delete tag %s: %s", tag_id, err)
            return Result.failure(str(err))

        def patch(c):
            changes = {"tags": [t for t in c["tags"] if t.id != tag_id]}
            if tag is not None:
                changes["clients"] = [
                    x.copy(tags=[t for t in x.tags if t != tag.name]) if tag.name in x.tags else x
                    for x in c["clients"]
                ]
            return changes

        self._apply(patch)
        return Result.success(tag_id)

    def add_client_link(self, client_id: int, title: str, url: str) -> Result:
        try:
            link = self._adapters.client_links.create({"client_id": client_id, "title": title, "url": url})
        except ApiError as err:
            logger.warning("Failed to add link for client %s: %s", client_id, err)
            return Result.failure(str(err))
        self._apply(lambda c: {"client_links": [link] + c["client_links"]})
        return Result.success(link)

    def delete_client_link(self, link_id: str) -> Result:
        try:
            self._adapters.client_links.delete(link_id)
        except ApiError as err:
            logger.warning("Failed to delete client link %s: %s", link_id, err)
            return Result.failure(str(err))
        self._apply(lambda c: {"client_links": [x for x in c["client_links"] if x.id != link_id]})
        return Result.success(link_id)

    # =========================================================================
    # ADD-ON SERVICE REQUESTS
    # =========================================================================

    def request_service(self, client_id: int, service_id: int) -> Result:
        try:
            request = self._adapters.service_requests.create({"client_id": client_id, "service_id": service_id})
        except ApiError as err:
            logger.warning("Failed to request service %s for client %s: %s", service_id, client_id, err)
            return Result.failure(str(err))
        self._apply(lambda c: {"service_requests": [request] + c["service_requests"]})
        return Result.success(request)

    def update_service_request(self, request_id: int, changes: dict) -> Result:
        try:
            request = self._adapters.service_requests.update(request_id, changes)
        except ApiError as err:
            logger.warning("Failed to update service request %s: %s", request_id, err)
            return Result.failure(str(err))
        self._apply(lambda c: {"service_requests": _replace(c["service_requests"], request)})
        return Result.success(request)

    # =========================================================================
    # DERIVED GETTERS
    # =========================================================================

    def total_sales(self) -> float:
        return round(sum(c.total_sales or 0 for c in self.collections["clients"]), 2)

    def total_collection(self) -> float:
        return round(sum(c.total_collection or 0 for c in self.collections["clients"]), 2)

    def total_balance(self) -> float:
        return round(sum(c.balance or 0 for c in self.collections["clients"]), 2)

    def unread_messages_count(self) -> int:
        return sum(chat.unread_count or 0 for chat in self.collections["chats"])

    def get_client(self, client_id) -> Optional[e.Client]:
        return _find(self.collections["clients"], client_id)

    def _by_client(self, name: str, client_id) -> list:
        return [x for x in self.collections[name] if x.client_id == client_id]

    def invoices_for(self, client_id) -> list:
        return self._by_client("invoices", client_id)

    def payments_for(self, client_id) -> list:
        return self._by_client("payments", client_id)

    def components_for(self, client_id) -> list:
        return self._by_client("components", client_id)

    def progress_steps_for(self, client_id) -> list:
        return self._by_client("progress_steps", client_id)

    def links_for(self, client_id) -> list:
        return self._by_client("client_links", client_id)

    def events_for(self, client_id) -> list:
        return self._by_client("calendar_events", client_id)

    def service_requests_for(self, client_id) -> list:
        return self._by_client("service_requests", client_id)

    def chat_for(self, client_id) -> Optional[e.Chat]:
        return next((chat for chat in self.collections["chats"] if chat.client_id == client_id), None)
