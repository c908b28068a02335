# exams/services/authoring.py
from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction

from ..exceptions import BlueprintInvalid
from ..models import (
    Blueprint, BlueprintQuestion, BlueprintSection, BlueprintVariant, Question,
    SectionPoolEntry, SectionQuestion,
)
from .assembly import assemble, pick_variant_code
from .blueprint import (
    BlueprintSpec, load_blueprint_spec, spec_from_payload, validate_blueprint_spec,
)
from .sampler import PoolSampler, SeededPoolSampler

logger = logging.getLogger(__name__)

CONTENT_KEYS = ("questions", "sections", "variants")
SCALAR_FIELDS = (
    "title", "description", "duration_minutes", "mode", "test_type", "year", "max_attempts",
    "start_at", "end_at", "randomize_section_order", "negative_marking_enabled", "negative_mark_value",
)


def _shapes_supplied(data: dict) -> int:
    return sum(1 for k in CONTENT_KEYS if data.get(k))


def _check_window(start_at, end_at):
    if start_at and end_at and start_at >= end_at:
        raise BlueprintInvalid("start_at must be earlier than end_at")


def _write_sections(blueprint: Blueprint, sections: list, variant: BlueprintVariant | None = None):
    for i, sec in enumerate(sections, start=1):
        row = BlueprintSection.objects.create(
            blueprint=blueprint,
            variant=variant,
            title=sec.title or f"Section {i}",
            order=sec.order,
            questions_to_select_from_pool=sec.questions_to_select_from_pool,
            pool_marks=sec.pool_marks,
            randomize_question_order_in_section=sec.randomize_question_order_in_section,
        )
        SectionQuestion.objects.bulk_create([
            SectionQuestion(section=row, question_id=ref.question_id, order=n, marks=ref.marks)
            for n, ref in enumerate(sec.questions, start=1)
        ])
        SectionPoolEntry.objects.bulk_create([
            SectionPoolEntry(section=row, question_id=p.question_id, order=n, marks=p.marks)
            for n, p in enumerate(sec.pool, start=1)
        ])


def _write_content(blueprint: Blueprint, spec: BlueprintSpec):
    """Replace the question content of ``blueprint`` with ``spec``'s active shape."""
    blueprint.sections.all().delete()
    blueprint.variants.all().delete()
    blueprint.flat_questions.all().delete()

    if spec.variants:
        for n, v in enumerate(spec.variants, start=1):
            variant = BlueprintVariant.objects.create(
                blueprint=blueprint, code=v.code, order=n, negative_mark_value=v.negative_mark_value,
            )
            _write_sections(blueprint, v.sections, variant)
    elif spec.sections:
        _write_sections(blueprint, spec.sections)
    else:
        BlueprintQuestion.objects.bulk_create([
            BlueprintQuestion(blueprint=blueprint, question_id=ref.question_id, order=n, marks=ref.marks)
            for n, ref in enumerate(spec.questions, start=1)
        ])


@transaction.atomic
def create_blueprint(data: dict, created_by=None) -> Blueprint:
    """
    Validate and persist a blueprint from validated serializer data.
    Raises BlueprintInvalid before anything is written.
    """
    spec = spec_from_payload(data)
    validate_blueprint_spec(spec, _shapes_supplied(data))
    _check_window(data.get("start_at"), data.get("end_at"))

    blueprint = Blueprint.objects.create(
        created_by=created_by,
        **{k: data[k] for k in SCALAR_FIELDS if k in data},
    )
    _write_content(blueprint, spec)
    logger.info("blueprint %s created (%s) by %s", blueprint.pk, spec.shape, getattr(created_by, "pk", None))
    return blueprint


@transaction.atomic
def update_blueprint(blueprint: Blueprint, data: dict, updated_by=None) -> Blueprint:
    """
    Partial update. Supplying any content key replaces the whole content tree;
    attempts already started keep their own assembled sets.
    """
    for k in SCALAR_FIELDS:
        if k in data:
            setattr(blueprint, k, data[k])
    _check_window(blueprint.start_at, blueprint.end_at)

    if any(k in data for k in CONTENT_KEYS):
        spec = spec_from_payload(data, defaults={
            "randomize_section_order": blueprint.randomize_section_order,
            "negative_marking_enabled": blueprint.negative_marking_enabled,
            "negative_mark_value": blueprint.negative_mark_value,
        })
        validate_blueprint_spec(spec, _shapes_supplied(data))
        _write_content(blueprint, spec)

    blueprint.updated_by = updated_by
    blueprint.save()
    logger.info("blueprint %s updated by %s", blueprint.pk, getattr(updated_by, "pk", None))
    return blueprint


@transaction.atomic
def clone_blueprint(blueprint: Blueprint, by_user=None) -> Blueprint:
    # inactive pool members are copied too; assembly filters them
    spec = load_blueprint_spec(blueprint, active_only=False)
    copy = Blueprint.objects.create(
        **{k: getattr(blueprint, k) for k in SCALAR_FIELDS if k != "title"},
        title=f"{blueprint.title} (Clone)",
        created_by=by_user,
    )
    _write_content(copy, spec)
    logger.info("blueprint %s cloned into %s", blueprint.pk, copy.pk)
    return copy


@transaction.atomic
def create_random_blueprint(*, count: int = 50, title: str = "Practice Paper", duration: int = 90,
                            marks_per_question=Decimal("1"), created_by=None,
                            sampler: PoolSampler | None = None) -> Blueprint:
    """Flat blueprint built by drawing ``count`` active questions from the whole bank."""
    sampler = sampler or PoolSampler()
    bank = list(Question.objects.filter(is_active=True).order_by("created_at").values_list("id", flat=True))
    picked = sampler.sample(bank, count)
    data = {
        "title": title,
        "duration_minutes": duration,
        "questions": [{"question": qid, "marks": marks_per_question} for qid in picked],
    }
    return create_blueprint(data, created_by=created_by)


def preview_assembly(blueprint: Blueprint, variant_code=None, seed=None, rotation_key=""):
    """
    Assemble without persisting. Returns (variant_code, items, negative_mark_value).
    A seed makes the draw reproducible.
    """
    spec = load_blueprint_spec(blueprint)
    code = pick_variant_code(spec, variant_code, rotation_key=rotation_key or str(blueprint.pk))
    sampler = SeededPoolSampler(f"{blueprint.pk}:{seed}") if seed else PoolSampler()
    items = assemble(spec, code, sampler)
    return code, items, spec.effective_negative_mark_value(code)
