# Overview: Service-layer operations for package components, progress steps and step comments.

"""
Progress Service

Components are the deliverables of a client's package; progress steps are
the onboarding tracker. Every component gets a matching step
("Complete setup and configuration for <name>", due in 7 days) and
copy_components_to_steps back-fills steps for components that predate the
tracker. Step titles are matched case-insensitively.
"""

from __future__ import annotations

from ..extensions import db
from ..models import Component, ProgressStep, ProgressStepComment
from ..validation import (
    ModelValidationPolicy, NotFoundError, ValidationError, validate_payload,
)
from sentra.time_utils import utcnow, days_from_now
from .client_service import get_client


STEP_DEADLINE_DAYS = 7

COMPONENT_POLICY = ModelValidationPolicy(
    writable_fields={"id", "client_id", "invoice_id", "name", "price", "active"},
    required_on_create={"client_id", "name"},
    ignored_fields={"created_at", "updated_at"},
)

STEP_POLICY = ModelValidationPolicy(
    writable_fields={
        "id", "client_id", "title", "description", "deadline", "completed",
        "completed_date", "important",
    },
    required_on_create={"client_id", "title"},
    ignored_fields={"comments", "created_at", "updated_at"},
)

COMMENT_POLICY = ModelValidationPolicy(
    writable_fields={"text", "username", "attachment_url", "attachment_type"},
    required_on_create={"text", "username"},
    ignored_fields={"id", "step_id", "created_at"},
)


def component_step_description(component_name: str) -> str:
    return f"Complete setup and configuration for {component_name}"


# =============================================================================
# COMPONENTS
# =============================================================================

def list_components(client_id: int | None = None) -> list[Component]:
    query = db.session.query(Component)
    if client_id is not None:
        query = query.filter_by(client_id=client_id)
    return query.order_by(Component.created_at).all()


def create_component(payload: dict) -> Component:
    """Create a component and the progress step that tracks it."""
    patch = validate_payload(model=Component, payload=payload, policy=COMPONENT_POLICY, partial=False)
    if not patch.get("id"):
        patch.pop("id", None)
    get_client(patch["client_id"])

    component = Component(**patch)
    db.session.add(component)
    if not _step_exists(component.client_id, component.name):
        db.session.add(_step_for_component(component))
    db.session.commit()
    return component


def update_component(component_id: str, payload: dict) -> Component:
    component = db.session.get(Component, component_id)
    if not component:
        raise NotFoundError("Component not found")
    patch = validate_payload(model=Component, payload=payload, policy=COMPONENT_POLICY, partial=True)
    patch.pop("id", None)
    patch.pop("client_id", None)
    for key, value in patch.items():
        setattr(component, key, value)
    db.session.commit()
    return component


def delete_component(component_id: str) -> None:
    component = db.session.get(Component, component_id)
    if not component:
        raise NotFoundError("Component not found")
    db.session.delete(component)
    db.session.commit()


def _step_exists(client_id: int, title: str) -> bool:
    return (
        db.session.query(ProgressStep)
        .filter(ProgressStep.client_id == client_id)
        .filter(db.func.lower(ProgressStep.title) == title.strip().lower())
        .first()
        is not None
    )


def _step_for_component(component: Component) -> ProgressStep:
    return ProgressStep(
        client_id=component.client_id,
        title=component.name,
        description=component_step_description(component.name),
        deadline=days_from_now(STEP_DEADLINE_DAYS),
        completed=False,
        important=False,
    )


def copy_components_to_steps(client_id: int) -> list[ProgressStep]:
    """Create steps for this client's components that have none yet; returns the new steps."""
    get_client(client_id)
    created = []
    seen = set()
    for component in list_components(client_id):
        key = component.name.strip().lower()
        if key in seen or _step_exists(client_id, component.name):
            continue
        seen.add(key)
        step = _step_for_component(component)
        db.session.add(step)
        created.append(step)
    db.session.commit()
    return created


# =============================================================================
# PROGRESS STEPS
# =============================================================================

def list_steps(client_id: int | None = None) -> list[ProgressStep]:
    query = db.session.query(ProgressStep)
    if client_id is not None:
        query = query.filter_by(client_id=client_id)
    return query.order_by(ProgressStep.deadline, ProgressStep.created_at).all()


def get_step(step_id: str) -> ProgressStep:
    step = db.session.get(ProgressStep, step_id)
    if not step:
        raise NotFoundError("Progress step not found")
    return step


def create_step(payload: dict) -> ProgressStep:
    patch = validate_payload(model=ProgressStep, payload=payload, policy=STEP_POLICY, partial=False)
    if not patch.get("id"):
        patch.pop("id", None)
    get_client(patch["client_id"])
    if not patch.get("deadline"):
        patch["deadline"] = days_from_now(STEP_DEADLINE_DAYS)
    if patch.get("completed") and not patch.get("completed_date"):
        patch["completed_date"] = utcnow()

    step = ProgressStep(**patch)
    db.session.add(step)
    db.session.commit()
    return step


def update_step(step_id: str, payload: dict) -> ProgressStep:
    step = get_step(step_id)
    patch = validate_payload(model=ProgressStep, payload=payload, policy=STEP_POLICY, partial=True)
    patch.pop("id", None)
    patch.pop("client_id", None)

    if "completed" in patch:
        if patch["completed"] and not step.completed:
            patch.setdefault("completed_date", utcnow())
        elif not patch["completed"]:
            patch["completed_date"] = None

    for key, value in patch.items():
        setattr(step, key, value)
    db.session.commit()
    return step


def delete_step(step_id: str) -> None:
    step = get_step(step_id)
    db.session.delete(step)
    db.session.commit()


# =============================================================================
# COMMENTS
# =============================================================================

def add_comment(step_id: str, payload: dict) -> ProgressStepComment:
    step = get_step(step_id)
    patch = validate_payload(model=ProgressStepComment, payload=payload, policy=COMMENT_POLICY, partial=False)
    if patch.get("attachment_url") and not patch.get("attachment_type"):
        raise ValidationError("attachment_type is required with attachment_url")
    comment = ProgressStepComment(step_id=step.id, **patch)
    db.session.add(comment)
    db.session.commit()
    return comment


def delete_comment(comment_id: str) -> None:
    comment = db.session.get(ProgressStepComment, comment_id)
    if not comment:
        raise NotFoundError("Comment not found")
    db.session.delete(comment)
    db.session.commit()
