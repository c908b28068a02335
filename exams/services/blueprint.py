# exams/services/blueprint.py
"""
Plain, ORM-free view of a Blueprint.

Assembly, marks lookup and validation all work on these dataclasses so they stay
pure functions of their inputs. ``load_blueprint_spec`` reads the persisted rows;
``spec_from_payload`` reads validated authoring input before anything is saved.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Hashable, Optional

from django.conf import settings

from ..exceptions import BlueprintInvalid, InvalidInput

SHAPE_FLAT = "flat"
SHAPE_SECTIONS = "sections"
SHAPE_VARIANTS = "variants"

DEFAULT_MARKS = Decimal("1")


def min_questions_required() -> int:
    return int(getattr(settings, "BLUEPRINT_MIN_QUESTIONS", 2))


def _dec(value, default=DEFAULT_MARKS) -> Decimal:
    if value is None:
        return default
    return value if isinstance(value, Decimal) else Decimal(str(value))


@dataclass(frozen=True)
class QuestionRef:
    question_id: Hashable
    marks: Decimal = DEFAULT_MARKS


@dataclass(frozen=True)
class PoolEntry:
    question_id: Hashable
    marks: Optional[Decimal] = None


@dataclass
class SectionSpec:
    title: str
    order: int = 1
    questions: list[QuestionRef] = field(default_factory=list)
    pool: list[PoolEntry] = field(default_factory=list)
    questions_to_select_from_pool: int = 0
    pool_marks: Decimal = DEFAULT_MARKS
    randomize_question_order_in_section: bool = False

    def pool_contribution(self) -> int:
        if self.questions_to_select_from_pool <= 0:
            return 0
        return min(len(self.pool), self.questions_to_select_from_pool)


@dataclass
class VariantSpec:
    code: str
    sections: list[SectionSpec] = field(default_factory=list)
    negative_mark_value: Optional[Decimal] = None


@dataclass
class BlueprintSpec:
    questions: list[QuestionRef] = field(default_factory=list)
    sections: list[SectionSpec] = field(default_factory=list)
    variants: list[VariantSpec] = field(default_factory=list)
    randomize_section_order: bool = False
    negative_marking_enabled: bool = False
    negative_mark_value: Decimal = Decimal("0.25")

    @property
    def shape(self) -> str:
        if self.variants:
            return SHAPE_VARIANTS
        if self.sections:
            return SHAPE_SECTIONS
        return SHAPE_FLAT

    def variant(self, code: str) -> VariantSpec:
        for v in self.variants:
            if v.code == code:
                return v
        raise InvalidInput(f"Unknown variant '{code}'.")

    def resolve_sections(self, variant_code: Optional[str] = None) -> list[SectionSpec]:
        """
        Sections of the active shape. A flat list is exposed as one untitled,
        non-randomized section so callers only deal with sections.
        """
        if self.variants:
            if variant_code is None:
                raise InvalidInput("A variant must be selected for a multi-variant test.")
            return list(self.variant(variant_code).sections)
        if variant_code:
            raise InvalidInput("This test has no variants.")
        if self.sections:
            return list(self.sections)
        return [SectionSpec(title="", order=1, questions=list(self.questions))]

    def effective_negative_mark_value(self, variant_code: Optional[str] = None) -> Decimal:
        if variant_code and self.variants:
            override = self.variant(variant_code).negative_mark_value
            if override is not None:
                return override
        return self.negative_mark_value

    def resolved_forms(self) -> list[tuple[Optional[str], list[SectionSpec]]]:
        """Every form a student could be handed: each variant, or the single top-level form."""
        if self.variants:
            return [(v.code, list(v.sections)) for v in self.variants]
        return [(None, self.resolve_sections())]


def validate_blueprint_spec(spec: BlueprintSpec, shapes_supplied: int = 1) -> None:
    """
    Authoring-time checks. Raises BlueprintInvalid.

    Every form (each variant on its own) must be able to yield at least
    ``min_questions_required()`` questions, and a question may appear only once
    per form, across manual lists and pools alike.
    """
    from .marks import obtainable_question_count

    if shapes_supplied > 1:
        raise BlueprintInvalid("Provide only one of questions, sections or variants.")

    codes = [v.code for v in spec.variants]
    if len(codes) != len(set(codes)):
        raise BlueprintInvalid("Variant codes must be unique.")

    minimum = min_questions_required()
    for code, sections in spec.resolved_forms():
        label = f"Variant {code}" if code else "Test series"
        seen = set()
        for sec in sections:
            if sec.questions_to_select_from_pool < 0:
                raise BlueprintInvalid(f"{label}: questions_to_select_from_pool cannot be negative.")
            for qid in [r.question_id for r in sec.questions] + [p.question_id for p in sec.pool]:
                if qid in seen:
                    raise BlueprintInvalid(f"{label}: question {qid} is used more than once.")
                seen.add(qid)

        total = obtainable_question_count(spec, code)
        if total < minimum:
            raise BlueprintInvalid(
                f"{label} must have at least {minimum} questions. Current count: {total}"
            )


# ---------- builders ----------

def _qid(value):
    return getattr(value, "pk", value)


def _section_from_payload(data: dict, default_order: int) -> SectionSpec:
    return SectionSpec(
        title=data.get("title") or "",
        order=data.get("order") or default_order,
        questions=[QuestionRef(_qid(q["question"]), _dec(q.get("marks"))) for q in data.get("questions") or []],
        pool=[
            PoolEntry(_qid(p["question"]), _dec(p.get("marks"), None))
            for p in data.get("question_pool") or []
        ],
        questions_to_select_from_pool=data.get("questions_to_select_from_pool") or 0,
        pool_marks=_dec(data.get("pool_marks")),
        randomize_question_order_in_section=bool(data.get("randomize_question_order_in_section")),
    )


def spec_from_payload(data: dict, defaults: Optional[dict] = None) -> BlueprintSpec:
    """Build a spec from validated serializer data (question values may be model instances)."""
    defaults = defaults or {}

    def pick(key, fallback):
        return data[key] if key in data else defaults.get(key, fallback)

    return BlueprintSpec(
        questions=[QuestionRef(_qid(q["question"]), _dec(q.get("marks"))) for q in data.get("questions") or []],
        sections=[_section_from_payload(s, i) for i, s in enumerate(data.get("sections") or [], start=1)],
        variants=[
            VariantSpec(
                code=v["code"],
                sections=[_section_from_payload(s, i) for i, s in enumerate(v.get("sections") or [], start=1)],
                negative_mark_value=_dec(v.get("negative_mark_value"), None),
            )
            for v in data.get("variants") or []
        ],
        randomize_section_order=bool(pick("randomize_section_order", False)),
        negative_marking_enabled=bool(pick("negative_marking_enabled", False)),
        negative_mark_value=_dec(pick("negative_mark_value", None), Decimal("0.25")),
    )


def _section_from_model(sec) -> SectionSpec:
    return SectionSpec(
        title=sec.title,
        order=sec.order,
        questions=[QuestionRef(sq.question_id, sq.marks) for sq in sec.questions.all()],
        pool=[PoolEntry(pe.question_id, pe.marks) for pe in sec.pool_entries.all()],
        questions_to_select_from_pool=sec.questions_to_select_from_pool,
        pool_marks=sec.pool_marks,
        randomize_question_order_in_section=sec.randomize_question_order_in_section,
    )


def load_blueprint_spec(blueprint, active_only: bool = True) -> BlueprintSpec:
    """Read the persisted content of ``blueprint`` (a models.Blueprint) into a spec."""
    from django.db.models import Prefetch

    from ..models import BlueprintSection, SectionPoolEntry

    # inactive questions drop out of pools, so a pool can shrink after authoring
    pool_qs = SectionPoolEntry.objects.order_by("order", "created_at")
    if active_only:
        pool_qs = pool_qs.filter(question__is_active=True)
    sections = (BlueprintSection.objects
                .filter(blueprint=blueprint)
                .prefetch_related("questions", Prefetch("pool_entries", queryset=pool_qs))
                .order_by("order", "created_at"))
    top_level, by_variant = [], {}
    for sec in sections:
        if sec.variant_id is None:
            top_level.append(_section_from_model(sec))
        else:
            by_variant.setdefault(sec.variant_id, []).append(_section_from_model(sec))

    return BlueprintSpec(
        questions=[QuestionRef(bq.question_id, bq.marks) for bq in blueprint.flat_questions.all()],
        sections=top_level,
        variants=[
            VariantSpec(code=v.code, sections=by_variant.get(v.pk, []), negative_mark_value=v.negative_mark_value)
            for v in blueprint.variants.all()
        ],
        randomize_section_order=blueprint.randomize_section_order,
        negative_marking_enabled=blueprint.negative_marking_enabled,
        negative_mark_value=blueprint.negative_mark_value,
    )
