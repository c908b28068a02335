"""
Test Scoring Engine
Exact-match grading, negative marking and percentage rounding.
"""
from decimal import Decimal

import pytest

from exams.exceptions import InvalidInput
from exams.services.assembly import assemble
from exams.services.scoring import ResponseIn, grade, parse_responses, percentage_of


def _responses(*pairs):
    return [ResponseIn(qid, tuple(sel)) for qid, sel in pairs]


@pytest.fixture
def assembled(three_question_spec, sampler):
    return assemble(three_question_spec, sampler=sampler)


def test_two_right_one_wrong_without_negative_marking(assembled, answer_key):
    result = grade(assembled, _responses(("q1", [0]), ("q2", [1]), ("q3", [0])), answer_key, False, Decimal("0.25"))
    assert result.score == Decimal("2")
    assert result.max_score == Decimal("3")
    assert result.percentage == 67


def test_two_right_one_wrong_with_negative_marking(assembled, answer_key):
    result = grade(assembled, _responses(("q1", [0]), ("q2", [1]), ("q3", [0])), answer_key, True, Decimal("0.25"))
    assert result.score == Decimal("1.75")
    assert result.max_score == Decimal("3")
    assert result.percentage == 58
    wrong = [g for g in result.breakdown if not g.is_correct]
    assert [g.earned_marks for g in wrong] == [Decimal("-0.25")]


def test_unanswered_questions_still_count_toward_max(assembled, answer_key):
    result = grade(assembled, _responses(("q1", [0])), answer_key, True, Decimal("0.25"))
    assert result.score == Decimal("1")
    assert result.max_score == Decimal("3")
    assert result.percentage == 33
    assert len(result.breakdown) == 1


def test_submitted_empty_selection_is_penalised(assembled, answer_key):
    result = grade(assembled, _responses(("q1", [0]), ("q2", [1]), ("q3", [])), answer_key, True, Decimal("0.25"))
    assert result.score == Decimal("1.75")
    assert result.percentage == 58
    blank = [g for g in result.breakdown if g.question_id == "q3"][0]
    assert blank.is_correct is False
    assert blank.earned_marks == Decimal("-0.25")


def test_submitted_empty_selection_earns_nothing_without_negative_marking(assembled, answer_key):
    result = grade(assembled, _responses(("q1", [])), answer_key, False, Decimal("0.25"))
    assert result.score == Decimal("0")
    assert result.breakdown[0].earned_marks == Decimal("0")


def test_question_ids_are_matched_case_insensitively(sampler):
    from exams.services.blueprint import BlueprintSpec, QuestionRef
    qid = "0f8fad5b-d9cb-469f-a165-70867728950e"
    spec = BlueprintSpec(questions=[QuestionRef(qid), QuestionRef("q2")])
    responses = parse_responses([{"question_id": qid.upper(), "selected_option_indices": [1]}])
    result = grade(assemble(spec, sampler=sampler), responses, {qid: [1], "q2": [0]}, True, Decimal("0.25"))
    assert result.score == Decimal("1")
    assert [g.question_id for g in result.breakdown] == [qid]


def test_grading_is_idempotent(assembled, answer_key):
    responses = _responses(("q1", [0]), ("q2", [3]), ("q3", [2]))
    first = grade(assembled, responses, answer_key, True, Decimal("0.25"))
    second = grade(assembled, responses, answer_key, True, Decimal("0.25"))
    assert (first.score, first.max_score, first.percentage) == (second.score, second.max_score, second.percentage)


def test_score_never_exceeds_max_without_negative_marking(assembled, answer_key):
    everything_wrong = _responses(("q1", [3]), ("q2", [3]), ("q3", [3]))
    result = grade(assembled, everything_wrong, answer_key, False, Decimal("0.25"))
    assert result.score == Decimal("0")
    assert result.score <= result.max_score


def test_score_can_go_negative_with_negative_marking(assembled, answer_key):
    everything_wrong = _responses(("q1", [3]), ("q2", [3]), ("q3", [3]))
    result = grade(assembled, everything_wrong, answer_key, True, Decimal("0.25"))
    assert result.score == Decimal("-0.75")
    assert result.percentage == -25


def test_penalty_scales_with_question_marks(answer_key, sampler):
    from exams.services.blueprint import BlueprintSpec, QuestionRef
    spec = BlueprintSpec(questions=[QuestionRef("q1", Decimal("4")), QuestionRef("q2", Decimal("2"))])
    result = grade(assemble(spec, sampler=sampler), _responses(("q1", [2])), answer_key, True, Decimal("0.25"))
    assert result.score == Decimal("-1")
    assert result.max_score == Decimal("6")


def test_multi_select_needs_exact_set(sampler):
    from exams.services.blueprint import BlueprintSpec, QuestionRef
    spec = BlueprintSpec(questions=[QuestionRef("m1"), QuestionRef("m2"), QuestionRef("m3")])
    key = {"m1": [0, 2], "m2": [0, 2], "m3": [0, 2]}
    result = grade(
        assemble(spec, sampler=sampler),
        _responses(("m1", [2, 0]), ("m2", [0]), ("m3", [0, 2, 2])),
        key, False, Decimal("0"),
    )
    by_id = {g.question_id: g.is_correct for g in result.breakdown}
    assert by_id == {"m1": True, "m2": False, "m3": True}


def test_unknown_questions_are_skipped_and_logged(assembled, answer_key, caplog):
    responses = _responses(("q1", [0]), ("deleted", [1]), ("never-assembled", [0]))
    key = dict(answer_key, **{"never-assembled": [0]})
    with caplog.at_level("WARNING", logger="exams.services.scoring"):
        result = grade(assembled, responses, key, True, Decimal("0.25"))
    assert [g.question_id for g in result.breakdown] == ["q1"]
    assert result.score == Decimal("1")
    assert result.max_score == Decimal("3")
    assert "deleted" in caplog.text
    assert "never-assembled" in caplog.text


def test_last_answer_for_a_question_wins(assembled, answer_key):
    result = grade(assembled, _responses(("q1", [3]), ("q1", [0])), answer_key, True, Decimal("0.25"))
    assert result.score == Decimal("1")
    assert len(result.breakdown) == 1


def test_as_dict_is_json_friendly(assembled, answer_key):
    data = grade(assembled, _responses(("q1", [0])), answer_key, False, Decimal("0")).as_dict()
    assert data["score"] == 1.0
    assert data["max_score"] == 3.0
    assert data["breakdown"][0]["question_id"] == "q1"


@pytest.mark.parametrize("score, max_score, expected", [
    (Decimal("2"), Decimal("3"), 67),
    (Decimal("1.75"), Decimal("3"), 58),
    (Decimal("1"), Decimal("8"), 13),
    (Decimal("5"), Decimal("0"), 0),
    (Decimal("-1"), Decimal("40"), -2),
    (Decimal("1"), Decimal("40"), 3),
])
def test_percentage_rounding(score, max_score, expected):
    assert percentage_of(score, max_score) == expected


class TestParseResponses:
    def test_accepts_aliases(self):
        parsed = parse_responses([{"question": "q1", "selected": [1]}])
        assert parsed == [ResponseIn("q1", (1,))]

    def test_missing_selection_is_empty(self):
        assert parse_responses([{"question_id": "q1"}]) == [ResponseIn("q1", ())]

    def test_uuid_question_ids_are_canonicalised(self):
        parsed = parse_responses([{"question_id": "0F8FAD5B-D9CB-469F-A165-70867728950E", "selected": [0]}])
        assert parsed == [ResponseIn("0f8fad5b-d9cb-469f-a165-70867728950e", (0,))]

    @pytest.mark.parametrize("payload", [
        None,
        {"question_id": "q1"},
        "q1",
        ["q1"],
        [{"selected_option_indices": [0]}],
        [{"question_id": "q1", "selected_option_indices": "0"}],
        [{"question_id": "q1", "selected_option_indices": [-1]}],
        [{"question_id": "q1", "selected_option_indices": [True]}],
    ])
    def test_rejects_malformed_payloads(self, payload):
        with pytest.raises(InvalidInput):
            parse_responses(payload)
