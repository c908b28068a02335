"""
Test Question Marks Index
"""
from decimal import Decimal

import pytest

from exams.exceptions import InvalidInput
from exams.services.blueprint import BlueprintSpec, PoolEntry, QuestionRef, SectionSpec, VariantSpec
from exams.services.marks import build_marks_index, marks_for, obtainable_question_count


def _variants_spec():
    return BlueprintSpec(
        sections=[SectionSpec(title="ignored", questions=[QuestionRef("top", Decimal("9"))])],
        variants=[
            VariantSpec(code="A", sections=[
                SectionSpec(title="A1", questions=[QuestionRef("a1", Decimal("2")), QuestionRef("a2", Decimal("3"))]),
            ]),
            VariantSpec(code="B", sections=[
                SectionSpec(title="B1", questions=[QuestionRef("b1", Decimal("4"))],
                            pool=[PoolEntry("p1"), PoolEntry("p2"), PoolEntry("p3")],
                            questions_to_select_from_pool=2),
            ]),
        ],
    )


def test_flat_list_index():
    spec = BlueprintSpec(questions=[QuestionRef("q1", Decimal("2")), QuestionRef("q2", Decimal("1.5"))])
    assert build_marks_index(spec) == {"q1": Decimal("2"), "q2": Decimal("1.5")}


def test_sections_index_flattens_all_sections(three_question_spec):
    three_question_spec.sections.append(SectionSpec(title="Extra", questions=[QuestionRef("q4", Decimal("5"))]))
    index = build_marks_index(three_question_spec)
    assert set(index) == {"q1", "q2", "q3", "q4"}
    assert index["q4"] == Decimal("5")


def test_selected_variant_takes_precedence():
    index = build_marks_index(_variants_spec(), "A")
    assert index == {"a1": Decimal("2"), "a2": Decimal("3")}


def test_pool_candidates_are_not_indexed():
    assert build_marks_index(_variants_spec(), "B") == {"b1": Decimal("4")}


def test_variant_blueprint_requires_a_code():
    with pytest.raises(InvalidInput):
        build_marks_index(_variants_spec())


def test_marks_fall_back_to_one():
    index = {"q1": Decimal("3")}
    assert marks_for(index, "q1") == Decimal("3")
    assert marks_for(index, "missing") == Decimal("1")


def test_obtainable_count_adds_pool_contribution():
    spec = _variants_spec()
    assert obtainable_question_count(spec, "A") == 2
    assert obtainable_question_count(spec, "B") == 3
