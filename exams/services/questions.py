# exams/services/questions.py
import uuid

from django.db.models import Prefetch

from ..models import Question, QuestionOption


def _valid_ids(ids):
    out = set()
    for qid in ids:
        try:
            out.add(str(uuid.UUID(str(qid))))
        except ValueError:
            continue
    return out


class QuestionStore:
    """Read access to the question bank for grading."""

    def answer_key(self, question_ids) -> dict:
        """question id (str) -> correct option indices, for the ids that still exist."""
        ids = _valid_ids(question_ids)
        if not ids:
            return {}
        qs = (Question.objects
              .filter(id__in=ids)
              .prefetch_related(Prefetch("options", queryset=QuestionOption.objects.order_by("order", "created_at"))))
        return {str(q.pk): q.correct_option_indices() for q in qs}
