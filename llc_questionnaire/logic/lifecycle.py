"""Questionnaire lifecycle: creation, link-based access, saving and submission.

Every operation opens its own transaction through `db.transaction`. Domain
events are published only after the owning transaction has committed, and
access tokens never appear in log lines or event payloads.
"""

from __future__ import annotations

import logging
import secrets
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, Mapping, Optional, Tuple

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from llc_questionnaire.config import AppConfig, load_config
from llc_questionnaire.db.base import transaction
from llc_questionnaire.logic import events
from llc_questionnaire.logic import repository_businesses as businesses
from llc_questionnaire.logic import repository_orders as orders
from llc_questionnaire.logic import repository_questionnaires as questionnaires
from llc_questionnaire.logic import repository_state_configs as state_configs
from llc_questionnaire.logic import repository_tasks as tasks
from llc_questionnaire.logic.errors import (
    AlreadyCompleted,
    Expired,
    NotFound,
    OrderMissingUser,
    OrderNotFound,
    QuestionnaireError,
    TransactionFailed,
    Unauthorized,
    ValidationFailed,
)
from llc_questionnaire.logic.gating import evaluate_gating
from llc_questionnaire.logic.prepopulation import build_initial_responses, determine_products, strip_entity_suffix
from llc_questionnaire.logic.questionnaire_schema import get_schema
from llc_questionnaire.logic.section_filter import assemble_visible_sections
from llc_questionnaire.logic.serialization import to_iso, utcnow
from llc_questionnaire.logic.state_config import merge_state_config
from llc_questionnaire.logic.submission_mapper import apply_submission_fanout
from llc_questionnaire.models.order import OrderRecord
from llc_questionnaire.models.questionnaire import (
    QuestionnaireInstance,
    QuestionnaireStatus,
    TaskPriority,
    TaskStatus,
)
from llc_questionnaire.models.response_types import (
    OrderQuestionnaireEnvelope,
    QuestionnaireEnvelope,
    SaveResult,
    SubmitResult,
)

logger = logging.getLogger(__name__)

DEFAULT_STATE_CODE = "CA"
TASK_TYPE_QUESTIONNAIRE = "questionnaire"
TASK_TITLE = "Complete LLC Formation Questionnaire"


def _generate_token() -> str:
    return secrets.token_hex(32)


def _state_code(order: OrderRecord) -> str:
    return order.formation_state or order.business_state or DEFAULT_STATE_CODE


def _insert_owner_profile(conn, order: OrderRecord, state_code: str, now: datetime) -> None:
    name = strip_entity_suffix(order.company_name) or ""
    business = businesses.create_business(
        conn,
        {
            "owner_id": order.user_id,
            "order_id": order.id,
            "name": name,
            "legal_name": f"{name} LLC" if name else None,
            "state": state_code,
            "status": "PENDING",
            "business_address": order.business_address,
            "business_city": order.business_city,
            "business_state": order.business_state,
            "business_zip": order.business_zip,
            "email": order.contact_email,
            "phone": order.contact_phone,
        },
        now,
    )
    if not business["created"]:
        return
    contact_name = f"{order.contact_first_name or ''} {order.contact_last_name or ''}".strip()
    # Placeholder owner, not linked to a portal account; submission replaces it
    businesses.insert_member(
        conn,
        business["id"],
        {
            "name": contact_name or name,
            "email": order.contact_email,
            "phone": order.contact_phone,
            "member_type": "individual",
            "role": "OWNER",
            "ownership_percentage": 100,
            "can_view_documents": True,
            "can_upload_documents": True,
            "can_manage_services": True,
            "can_invite_members": True,
            "position": 0,
        },
        now,
    )


def create_questionnaire_for_order(
    order: OrderRecord,
    *,
    engine: Optional[Engine] = None,
    config: Optional[AppConfig] = None,
    now: Optional[datetime] = None,
) -> Tuple[QuestionnaireInstance, bool]:
    """Create the questionnaire for a paid order, or return the existing one.

    Returns `(instance, created)`. The instance, its companion task and the
    linked business profile are written in one transaction. A concurrent
    creation for the same order loses on the unique constraint and returns
    the winner's instance.
    """
    if not order.user_id:
        raise OrderMissingUser(f"Order {order.id} has no associated user")
    cfg = config or load_config()
    now = now or utcnow()

    with transaction(engine) as conn:
        existing = questionnaires.get_by_order_id(conn, order.id)
    if existing is not None:
        logger.info("questionnaire_exists order_id=%s questionnaire_id=%s", order.id, existing.id)
        return existing, False

    state_code = _state_code(order)
    initial = build_initial_responses(order)
    instance = QuestionnaireInstance(
        id=str(uuid.uuid4()),
        order_id=order.id,
        user_id=order.user_id,
        state_code=state_code,
        products=determine_products(order),
        pre_populated_data=initial,
        responses=dict(initial),
        status=QuestionnaireStatus.NOT_STARTED,
        access_token=_generate_token(),
        token_expires_at=now + timedelta(days=cfg.tokens.ttl_days),
        created_at=now,
    )
    try:
        with transaction(engine) as conn:
            questionnaires.insert_instance(conn, instance)
            tasks.create_task(
                conn,
                user_id=order.user_id,
                task_type=TASK_TYPE_QUESTIONNAIRE,
                title=TASK_TITLE,
                description=(
                    f"Please complete the questionnaire for {order.company_name} LLC formation in {state_code}."
                ),
                reference_type=tasks.REFERENCE_TYPE_QUESTIONNAIRE,
                reference_id=instance.id,
                priority=TaskPriority.HIGH,
                status=TaskStatus.PENDING,
                due_date=now + timedelta(days=cfg.tasks.due_days),
                action_url=cfg.tasks.action_url_template.format(
                    order_number=order.order_number, token=instance.access_token
                ),
                created_at=now,
            )
            _insert_owner_profile(conn, order, state_code, now)
    except IntegrityError:
        with transaction(engine) as conn:
            winner = questionnaires.get_by_order_id(conn, order.id)
        if winner is None:
            raise
        logger.info("questionnaire_create_race_lost order_id=%s questionnaire_id=%s", order.id, winner.id)
        return winner, False

    logger.info(
        "questionnaire_created order_id=%s questionnaire_id=%s products=%s",
        order.id,
        instance.id,
        instance.products,
    )
    events.publish(
        events.QUESTIONNAIRE_CREATED,
        {"questionnaire_id": instance.id, "order_id": order.id, "products": list(instance.products)},
    )
    return instance, True


def create_questionnaire_for_order_id(
    order_id: str,
    *,
    requested_by: Optional[str] = None,
    engine: Optional[Engine] = None,
    config: Optional[AppConfig] = None,
    now: Optional[datetime] = None,
) -> Tuple[QuestionnaireInstance, bool]:
    with transaction(engine) as conn:
        order = orders.get_order(conn, order_id)
    if order is None:
        raise OrderNotFound(f"Order {order_id} not found")
    if requested_by is not None and order.user_id and order.user_id != requested_by:
        logger.warning("order_access_denied order_id=%s", order_id)
        raise Unauthorized("Unauthorized access")
    return create_questionnaire_for_order(order, engine=engine, config=config, now=now)


def _check_access(
    instance: Optional[QuestionnaireInstance],
    user_id: str,
    now: datetime,
    engine: Optional[Engine],
) -> QuestionnaireInstance:
    if instance is None:
        raise NotFound("Questionnaire not found")
    if instance.user_id != user_id:
        logger.warning("questionnaire_access_denied questionnaire_id=%s", instance.id)
        raise Unauthorized("Unauthorized access")
    if instance.token_expires_at < now:
        if instance.status not in (QuestionnaireStatus.COMPLETED, QuestionnaireStatus.EXPIRED):
            with transaction(engine) as conn:
                questionnaires.set_status(conn, instance.id, QuestionnaireStatus.EXPIRED)
            logger.info("questionnaire_expired questionnaire_id=%s", instance.id)
        raise Expired("Questionnaire link has expired")
    return instance


def _load_by_token(access_token: str, user_id: str, now: datetime, engine: Optional[Engine]) -> QuestionnaireInstance:
    with transaction(engine) as conn:
        instance = questionnaires.get_by_token(conn, access_token)
    return _check_access(instance, user_id, now, engine)


def get_questionnaire_by_token(
    access_token: str,
    user_id: str,
    *,
    engine: Optional[Engine] = None,
    now: Optional[datetime] = None,
) -> QuestionnaireEnvelope:
    now = now or utcnow()
    instance = _load_by_token(access_token, user_id, now, engine)
    with transaction(engine) as conn:
        rows = state_configs.list_active_configs(conn, instance.state_code)
    sections = assemble_visible_sections(get_schema(), instance.products, instance.responses)
    return QuestionnaireEnvelope(
        questionnaire=instance.public_view(),
        sections=sections,
        state_config=merge_state_config(instance.state_code, rows),
    )


def get_questionnaire_by_order_id(
    order_id: str,
    user_id: str,
    *,
    engine: Optional[Engine] = None,
) -> OrderQuestionnaireEnvelope:
    with transaction(engine) as conn:
        instance = questionnaires.get_by_order_id(conn, order_id)
    if instance is None:
        raise NotFound("Questionnaire not found")
    if instance.user_id != user_id:
        logger.warning("questionnaire_access_denied questionnaire_id=%s", instance.id)
        raise Unauthorized("Unauthorized access")
    return OrderQuestionnaireEnvelope(questionnaire=instance.public_view(), access_token=instance.access_token)


def save_questionnaire_progress(
    access_token: str,
    user_id: str,
    responses: Mapping[str, Any],
    current_section: Optional[str] = None,
    *,
    engine: Optional[Engine] = None,
    now: Optional[datetime] = None,
) -> SaveResult:
    """Shallow-merge `responses` into the stored map and record progress."""
    now = now or utcnow()
    instance = _load_by_token(access_token, user_id, now, engine)
    if instance.is_completed:
        raise AlreadyCompleted("Questionnaire already completed")

    merged: Dict[str, Any] = {**instance.responses, **dict(responses or {})}
    status = (
        QuestionnaireStatus.IN_PROGRESS
        if instance.status == QuestionnaireStatus.NOT_STARTED
        else instance.status
    )
    with transaction(engine) as conn:
        changed = questionnaires.update_progress(
            conn,
            instance.id,
            merged,
            status,
            current_section or instance.current_section,
            now,
        )
        if changed == 0:
            raise AlreadyCompleted("Questionnaire already completed")
        tasks.transition_tasks(
            conn,
            reference_type=tasks.REFERENCE_TYPE_QUESTIONNAIRE,
            reference_id=instance.id,
            from_status=TaskStatus.PENDING,
            to_status=TaskStatus.IN_PROGRESS,
        )

    logger.info("questionnaire_saved questionnaire_id=%s keys=%s", instance.id, sorted(dict(responses or {}).keys()))
    events.publish(
        events.QUESTIONNAIRE_SAVED,
        {"questionnaire_id": instance.id, "status": status, "current_section": current_section or instance.current_section},
    )
    return SaveResult(success=True, saved_at=to_iso(now))


def submit_questionnaire(
    access_token: str,
    user_id: str,
    responses: Mapping[str, Any],
    *,
    engine: Optional[Engine] = None,
    config: Optional[AppConfig] = None,
    now: Optional[datetime] = None,
) -> SubmitResult:
    """Complete the questionnaire and fan its answers out in one transaction.

    Raises ValidationFailed before any write when a visible required question
    is unanswered (unless disabled in configuration). Failures inside the
    transaction roll everything back and surface as TransactionFailed.
    """
    cfg = config or load_config()
    now = now or utcnow()
    instance = _load_by_token(access_token, user_id, now, engine)
    if instance.is_completed:
        raise AlreadyCompleted("Questionnaire already completed")

    final: Dict[str, Any] = {**instance.responses, **dict(responses or {})}
    if cfg.submission.enforce_required:
        verdict = evaluate_gating(instance.products, final)
        if not verdict["ok"]:
            raise ValidationFailed("Required questions are unanswered", verdict["blocking_items"])

    try:
        with transaction(engine) as conn:
            if questionnaires.mark_completed(conn, instance.id, final, now) == 0:
                raise AlreadyCompleted("Questionnaire already completed")
            tasks.transition_tasks(
                conn,
                reference_type=tasks.REFERENCE_TYPE_QUESTIONNAIRE,
                reference_id=instance.id,
                to_status=TaskStatus.COMPLETED,
                completed_at=now,
            )
            summary = apply_submission_fanout(conn, instance, final, instance.products, now)
    except QuestionnaireError:
        raise
    except Exception as exc:
        logger.error("questionnaire_submit_failed questionnaire_id=%s error=%s", instance.id, exc)
        raise TransactionFailed("Failed to complete questionnaire submission") from exc

    logger.info("questionnaire_submitted questionnaire_id=%s order_id=%s", instance.id, instance.order_id)
    events.publish(
        events.QUESTIONNAIRE_SUBMITTED,
        {
            "questionnaire_id": instance.id,
            "order_id": instance.order_id,
            "business_id": summary["business_id"],
            "operating_agreement_created": summary["operating_agreement_created"],
        },
    )
    return SubmitResult(success=True, completed_at=to_iso(now))


__all__ = [
    "TASK_TITLE",
    "create_questionnaire_for_order",
    "create_questionnaire_for_order_id",
    "get_questionnaire_by_token",
    "get_questionnaire_by_order_id",
    "save_questionnaire_progress",
    "submit_questionnaire",
]
