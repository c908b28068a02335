"""
Pytest Configuration & Shared Fixtures
"""
import random
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from accounts.models import User
from exams.models import Question, QuestionOption
from exams.services.blueprint import BlueprintSpec, QuestionRef, SectionSpec
from exams.services.sampler import PoolSampler


@pytest.fixture
def sampler():
    """Sampler with a fixed random source so failures are reproducible."""
    return PoolSampler(random.Random(1234))


@pytest.fixture
def three_question_spec():
    """One section, three manual questions worth 1 mark each."""
    return BlueprintSpec(
        sections=[
            SectionSpec(
                title="Core",
                questions=[QuestionRef("q1", Decimal("1")), QuestionRef("q2", Decimal("1")),
                           QuestionRef("q3", Decimal("1"))],
            )
        ]
    )


@pytest.fixture
def answer_key():
    return {"q1": [0], "q2": [1], "q3": [2]}


# ---------- database fixtures ----------

@pytest.fixture
def student(db):
    return User.objects.create_user(username="student1", password="pw", role=User.Roles.STUDENT)


@pytest.fixture
def other_student(db):
    return User.objects.create_user(username="student2", password="pw", role=User.Roles.STUDENT)


@pytest.fixture
def teacher(db):
    return User.objects.create_user(username="teacher1", password="pw", role=User.Roles.TEACHER)


@pytest.fixture
def make_question(db):
    """Factory: a four-option question whose correct options are ``correct`` (zero-based)."""
    counter = {"n": 0}

    def _make(correct=(0,), is_active=True, options=4):
        counter["n"] += 1
        q = Question.objects.create(text=f"Question {counter['n']}?", is_active=is_active)
        QuestionOption.objects.bulk_create([
            QuestionOption(question=q, text=f"Option {i}", is_correct=i in correct, order=i)
            for i in range(options)
        ])
        return q

    return _make


@pytest.fixture
def questions(make_question):
    """Ten questions; the correct option of question ``i`` is ``i % 4``."""
    return [make_question(correct=(i % 4,)) for i in range(10)]


@pytest.fixture
def api_client():
    return APIClient()
