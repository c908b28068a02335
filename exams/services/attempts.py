# exams/services/attempts.py
"""
Attempt lifecycle: Created (started) -> Submitted, exactly once.

``start_attempt`` does not enforce ``Blueprint.max_attempts``; callers that want the
quota call ``ensure_attempts_remaining`` first.
"""
from __future__ import annotations

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from common.enums import AttemptStatus
from ..exceptions import (
    AlreadySubmitted, AttemptLimitReached, AttemptNotFound, BlueprintNotFound, Closed, NotYetOpen,
)
from ..models import Attempt, AttemptItem, AttemptResponse, Blueprint
from .assembly import AssembledItem, assemble, pick_variant_code
from .blueprint import load_blueprint_spec
from .questions import QuestionStore
from .scoring import GradeResult, grade, parse_responses

logger = logging.getLogger(__name__)


def check_window(blueprint: Blueprint, now=None) -> None:
    now = now or timezone.now()
    if blueprint.start_at and now < blueprint.start_at:
        raise NotYetOpen()
    if blueprint.end_at and now > blueprint.end_at:
        raise Closed()


def prior_attempt_count(blueprint, student) -> int:
    return Attempt.objects.filter(blueprint=blueprint, student=student).count()


def ensure_attempts_remaining(blueprint: Blueprint, student) -> int:
    """Caller-side quota check. Returns the number of attempts already made."""
    used = prior_attempt_count(blueprint, student)
    if used >= blueprint.max_attempts:
        raise AttemptLimitReached(
            f"You've reached the maximum number of {blueprint.max_attempts} attempts for this test."
        )
    return used


def load_blueprint(blueprint_id) -> Blueprint:
    try:
        bp = Blueprint.objects.filter(pk=blueprint_id).first()
    except (ValueError, TypeError, DjangoValidationError):
        bp = None
    if bp is None:
        raise BlueprintNotFound()
    return bp


def start_attempt(blueprint_id, student, *, variant_code=None, sampler=None, now=None) -> Attempt:
    """Load, window-check, assemble and persist a new Attempt in the started state."""
    blueprint = load_blueprint(blueprint_id)
    now = now or timezone.now()
    check_window(blueprint, now)

    spec = load_blueprint_spec(blueprint)
    code = pick_variant_code(spec, variant_code, rotation_key=f"{blueprint.pk}:{student.pk}")
    items = assemble(spec, code, sampler)

    with transaction.atomic():
        attempt = Attempt.objects.create(
            blueprint=blueprint,
            student=student,
            variant_code=code or "",
            attempt_no=prior_attempt_count(blueprint, student) + 1,
            started_at=now,
            max_score=sum((it.marks for it in items)),
        )
        AttemptItem.objects.bulk_create([
            AttemptItem(
                attempt=attempt,
                question_id=it.question_id,
                order=order_no,
                marks=it.marks,
                section_title=it.section_title,
            )
            for order_no, it in enumerate(items, start=1)
        ])

    logger.info("attempt %s started: blueprint=%s student=%s variant=%s questions=%s",
                attempt.pk, blueprint.pk, student.pk, code, len(items))
    return attempt


def _load_attempt(attempt_id, student=None) -> Attempt:
    qs = Attempt.objects.select_related("blueprint")
    if student is not None:
        qs = qs.filter(student=student)
    try:
        attempt = qs.filter(pk=attempt_id).first()
    except (ValueError, TypeError, DjangoValidationError):
        attempt = None
    if attempt is None:
        raise AttemptNotFound()
    return attempt


def _negative_mark_value(blueprint, variant_code):
    if variant_code:
        variant = blueprint.variants.filter(code=variant_code).first()
        if variant is not None and variant.negative_mark_value is not None:
            return variant.negative_mark_value
    return blueprint.negative_mark_value


def submit_attempt(attempt_id, responses, *, student=None, question_store=None, now=None) -> GradeResult:
    """
    Grade and close an attempt. Only one caller can move it from started to
    submitted: the write is conditional on ``submitted_at IS NULL``.
    """
    attempt = _load_attempt(attempt_id, student)
    parsed = parse_responses(responses)

    if attempt.submitted_at is not None:
        logger.warning("attempt %s: submit rejected, already submitted at %s", attempt.pk, attempt.submitted_at)
        raise AlreadySubmitted()

    blueprint = attempt.blueprint
    assembled = [
        AssembledItem(it.question_id, it.marks, it.section_title)
        for it in attempt.items.all().order_by("order")
    ]
    store = question_store or QuestionStore()
    answer_key = store.answer_key([r.question_id for r in parsed])

    negative_value = _negative_mark_value(blueprint, attempt.variant_code)

    result = grade(assembled, parsed, answer_key, blueprint.negative_marking_enabled, negative_value)

    now = now or timezone.now()
    with transaction.atomic():
        updated = (Attempt.objects
                   .filter(pk=attempt.pk, submitted_at__isnull=True)
                   .update(
                       submitted_at=now,
                       status=AttemptStatus.SUBMITTED,
                       score=result.score,
                       max_score=result.max_score,
                       percentage=result.percentage,
                       time_taken_seconds=max(0, int((now - attempt.started_at).total_seconds())),
                       updated_at=now,
                   ))
        if not updated:
            logger.warning("attempt %s: concurrent submit lost the race", attempt.pk)
            raise AlreadySubmitted()

        AttemptResponse.objects.bulk_create([
            AttemptResponse(
                attempt_id=attempt.pk,
                question_id=g.question_id,
                selected_option_indices=g.selected_option_indices,
                correct_option_indices=g.correct_option_indices,
                is_correct=g.is_correct,
                earned_marks=g.earned_marks,
                order=i,
            )
            for i, g in enumerate(result.breakdown, start=1)
        ])

    logger.info("attempt %s graded: score=%s max=%s pct=%s", attempt.pk, result.score, result.max_score, result.percentage)
    return result
