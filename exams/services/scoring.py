# exams/services/scoring.py
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from decimal import ROUND_HALF_CEILING, Decimal
from typing import Hashable, Iterable, Mapping, Sequence

from ..exceptions import InvalidInput
from .marks import index_from_refs, marks_for

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class ResponseIn:
    question_id: Hashable
    selected_option_indices: tuple[int, ...] = ()


@dataclass(frozen=True)
class GradedResponse:
    question_id: Hashable
    selected_option_indices: list[int]
    correct_option_indices: list[int]
    is_correct: bool
    earned_marks: Decimal


@dataclass
class GradeResult:
    score: Decimal
    max_score: Decimal
    percentage: int
    breakdown: list[GradedResponse] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "score": float(self.score),
            "max_score": float(self.max_score),
            "percentage": self.percentage,
            "breakdown": [
                {
                    "question_id": str(g.question_id),
                    "selected_option_indices": g.selected_option_indices,
                    "correct_option_indices": g.correct_option_indices,
                    "is_correct": g.is_correct,
                    "earned_marks": float(g.earned_marks),
                }
                for g in self.breakdown
            ],
        }


def canonical_question_id(value) -> str:
    try:
        return str(uuid.UUID(str(value)))
    except ValueError:
        return str(value)


def parse_responses(raw) -> list[ResponseIn]:
    """
    Validate a submitted payload: a list of ``{question_id, selected_option_indices}``.
    ``question``/``selected`` are accepted as aliases. Raises InvalidInput.
    """
    if raw is None or not isinstance(raw, list):
        raise InvalidInput("responses must be a list.")

    parsed = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise InvalidInput(f"responses[{i}] must be an object.")
        qid = item.get("question_id", item.get("question"))
        if not qid:
            raise InvalidInput(f"responses[{i}].question_id is required.")
        selected = item.get("selected_option_indices", item.get("selected")) or []
        if not isinstance(selected, list) or not all(
            isinstance(x, int) and not isinstance(x, bool) and x >= 0 for x in selected
        ):
            raise InvalidInput(f"responses[{i}].selected_option_indices must be a list of option indices.")
        parsed.append(ResponseIn(canonical_question_id(qid), tuple(selected)))
    return parsed


def percentage_of(score: Decimal, max_score: Decimal) -> int:
    if max_score <= 0:
        return 0
    return int((score / max_score * 100).quantize(Decimal("1"), rounding=ROUND_HALF_CEILING))


def grade(assembled: Sequence, responses: Iterable[ResponseIn],
          answer_key: Mapping[Hashable, Sequence[int]],
          negative_marking_enabled: bool, negative_mark_value) -> GradeResult:
    """
    Grade ``responses`` against the attempt's assembled set.

    ``answer_key`` maps question id -> correct option indices; questions missing
    from it (deleted from the bank) are skipped, as are questions that were never
    part of the assembled set. Exact set match only, no partial credit; a submitted
    empty selection is a mismatch like any other. Unanswered questions are the
    ones absent from ``responses``.
    """
    marks_index = {canonical_question_id(k): v for k, v in index_from_refs(assembled).items()}
    key = {canonical_question_id(k): v for k, v in answer_key.items()}
    penalty = Decimal(str(negative_mark_value)) if negative_marking_enabled else ZERO

    max_score = sum((Decimal(m) for m in marks_index.values()), ZERO)

    latest = {}
    for resp in responses:
        latest[canonical_question_id(resp.question_id)] = resp  # last answer for a question wins

    score = ZERO
    breakdown = []
    for qid, resp in latest.items():
        if qid not in marks_index:
            logger.warning("skipping response for question %s: not part of the assembled set", qid)
            continue
        if qid not in key:
            logger.warning("skipping response for question %s: question no longer in the store", qid)
            continue

        marks = marks_for(marks_index, qid)
        selected = sorted(set(resp.selected_option_indices))
        correct = sorted(set(key[qid]))

        is_correct = selected == correct
        if is_correct:
            earned = marks
        elif penalty:
            earned = -(penalty * marks)
        else:
            earned = ZERO

        score += earned
        breakdown.append(GradedResponse(qid, selected, correct, is_correct, earned))

    return GradeResult(
        score=score,
        max_score=max_score,
        percentage=percentage_of(score, max_score),
        breakdown=breakdown,
    )
