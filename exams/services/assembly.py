# exams/services/assembly.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Hashable, Optional

from ..exceptions import BlueprintInvalid, InvalidInput
from .blueprint import DEFAULT_MARKS, BlueprintSpec, SectionSpec, min_questions_required
from .sampler import PoolSampler, _seed_int

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssembledItem:
    question_id: Hashable
    marks: Decimal
    section_title: str = ""


def pick_variant_code(spec: BlueprintSpec, requested: Optional[str] = None,
                      rotation_key: str = "") -> Optional[str]:
    """
    Explicit request wins; otherwise hash the rotation key (blueprint + student)
    so the same student keeps landing on the same form.
    """
    if not spec.variants:
        if requested:
            raise InvalidInput("This test has no variants.")
        return None
    if requested:
        return spec.variant(requested).code
    codes = [v.code for v in spec.variants]
    return codes[_seed_int(rotation_key or "") % len(codes)]


def _assemble_section(sec: SectionSpec, sampler: PoolSampler) -> list[AssembledItem]:
    items = [AssembledItem(r.question_id, r.marks, sec.title) for r in sec.questions]

    if sec.questions_to_select_from_pool > 0:
        weights = {p.question_id: p.marks for p in sec.pool}
        for qid in sampler.sample([p.question_id for p in sec.pool], sec.questions_to_select_from_pool):
            marks = weights.get(qid)
            items.append(AssembledItem(qid, marks if marks is not None else (sec.pool_marks or DEFAULT_MARKS), sec.title))

    if sec.randomize_question_order_in_section:
        items = sampler.shuffle(items)
    return items


def assemble(spec: BlueprintSpec, variant_code: Optional[str] = None,
             sampler: Optional[PoolSampler] = None) -> list[AssembledItem]:
    """
    Materialize the ordered question set for one attempt. Pure apart from the
    sampler's randomness; the caller persists the result.
    """
    sampler = sampler or PoolSampler()
    sections = sorted(spec.resolve_sections(variant_code), key=lambda s: s.order)

    blocks = [_assemble_section(sec, sampler) for sec in sections]
    if spec.randomize_section_order:
        blocks = sampler.shuffle(blocks)

    assembled = [item for block in blocks for item in block]

    minimum = min_questions_required()
    if len(assembled) < minimum:
        logger.warning("assembly produced %s questions (variant=%s), need %s",
                       len(assembled), variant_code, minimum)
        raise BlueprintInvalid(
            f"Test must have at least {minimum} questions. Assembled: {len(assembled)}"
        )
    return assembled
