# exams/services/marks.py
from __future__ import annotations

from decimal import Decimal
from typing import Hashable, Iterable, Mapping, Optional

from .blueprint import DEFAULT_MARKS, BlueprintSpec


def index_from_refs(refs: Iterable) -> dict:
    """questionId -> marks for anything carrying ``question_id`` and ``marks``."""
    return {ref.question_id: ref.marks for ref in refs}


def build_marks_index(spec: BlueprintSpec, variant_code: Optional[str] = None) -> dict:
    """
    Manual QuestionRefs of the active shape: the selected variant's sections,
    else top-level sections, else the flat list. Pool candidates are not part
    of the index; they only get a weight once assembled.
    """
    refs = []
    for sec in spec.resolve_sections(variant_code):
        refs.extend(sec.questions)
    return index_from_refs(refs)


def marks_for(index: Mapping[Hashable, Decimal], question_id: Hashable) -> Decimal:
    marks = index.get(question_id)
    return marks if marks else DEFAULT_MARKS


def obtainable_question_count(spec: BlueprintSpec, variant_code: Optional[str] = None) -> int:
    """Manual entries from the index plus min(poolSize, toSelect) for each pool-backed section."""
    sections = spec.resolve_sections(variant_code)
    return len(build_marks_index(spec, variant_code)) + sum(s.pool_contribution() for s in sections)
