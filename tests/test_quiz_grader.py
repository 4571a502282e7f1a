import pytest

from classes.quiz_grader import QuizGrader
from models import QuizQuestion, QuizOption


def make_question(question_id, question_type, points, options):
    """options: list of (text, is_correct)"""
    return QuizQuestion(
        id=question_id,
        question_type=question_type,
        points=points,
        question_text=f"Question {question_id}",
        options=[
            QuizOption(option_text=text, is_correct=is_correct, order_index=index)
            for index, (text, is_correct) in enumerate(options)
        ],
    )


@pytest.fixture
def single():
    return make_question(1, "single_correct", 5, [("A", False), ("B", True)])


@pytest.fixture
def multiple():
    return make_question(2, "multiple_correct", 10, [("A", True), ("B", True), ("C", False)])


@pytest.fixture
def true_false():
    return make_question(3, "true_false", 1, [("true", True), ("false", False)])


def summary(result):
    return {key: result[key] for key in ("score", "total_points", "percentage", "passed")}


def test_evaluate_is_deterministic(single, multiple, true_false):
    questions = [single, multiple, true_false]
    answers = {"1": "B", "2": ["B", "A"], "3": "false"}

    first = QuizGrader.evaluate(questions, answers, passing_marks=60)
    second = QuizGrader.evaluate(questions, answers, passing_marks=60)

    assert summary(first) == summary(second)
    assert first["score"] == 15
    assert first["total_points"] == 16


@pytest.mark.parametrize("answers", [
    {},
    {"1": "B", "2": ["A", "B"], "3": "true"},
    {"1": "nope", "2": "A", "3": 7},
    {"1": ["B"], "2": ["A", "A"], "3": None},
])
def test_score_stays_within_total(single, multiple, true_false, answers):
    result = QuizGrader.evaluate([single, multiple, true_false], answers)
    assert 0 <= result["score"] <= result["total_points"]


def test_zero_question_quiz():
    result = QuizGrader.evaluate([], {}, passing_marks=60)
    assert summary(result) == {"score": 0, "total_points": 0, "percentage": 0, "passed": False}

    result = QuizGrader.evaluate([], {}, passing_marks=0)
    assert result["passed"] is True


def test_single_correct_exact_match(single):
    assert QuizGrader.evaluate([single], {"1": "B"})["score"] == 5
    assert QuizGrader.evaluate([single], {"1": "A"})["score"] == 0
    assert QuizGrader.evaluate([single], {"1": "b"})["score"] == 0


def test_single_correct_uses_first_correct_option():
    question = make_question(1, "single_correct", 2, [("A", True), ("B", True)])
    assert QuizGrader.evaluate([question], {"1": "A"})["score"] == 2
    assert QuizGrader.evaluate([question], {"1": "B"})["score"] == 0


def test_multiple_correct_set_equality(multiple):
    assert QuizGrader.evaluate([multiple], {"2": ["A", "B"]})["score"] == 10
    assert QuizGrader.evaluate([multiple], {"2": ["B", "A"]})["score"] == 10
    assert QuizGrader.evaluate([multiple], {"2": ["A"]})["score"] == 0
    assert QuizGrader.evaluate([multiple], {"2": ["A", "B", "C"]})["score"] == 0


def test_multiple_correct_rejects_bare_string(multiple, caplog):
    result = QuizGrader.evaluate([multiple], {"2": "A"})
    assert result["score"] == 0
    assert "expects a list" in caplog.text


def test_true_false_literal_gate(true_false):
    assert QuizGrader.evaluate([true_false], {"3": "true"})["score"] == 1
    assert QuizGrader.evaluate([true_false], {"3": "maybe"})["score"] == 0

    maybe_correct = make_question(4, "true_false", 1, [("maybe", True), ("false", False)])
    assert QuizGrader.evaluate([maybe_correct], {"4": "maybe"})["score"] == 0


def test_percentage_rounds_half_up():
    assert QuizGrader.percentage(2, 3) == 67
    assert QuizGrader.percentage(1, 8) == 13
    assert QuizGrader.percentage(1, 3) == 33
    assert QuizGrader.percentage(5, 0) == 0


def test_passed_compares_rounded_percentage():
    questions = [make_question(i, "single_correct", 1, [("x", True), ("y", False)]) for i in (1, 2, 3)]
    result = QuizGrader.evaluate(questions, {"1": "x", "2": "x", "3": "y"}, passing_marks=67)
    assert result["percentage"] == 67
    assert result["passed"] is True


def test_two_question_quiz_scenario():
    questions = [
        make_question(1, "single_correct", 5, [("A", True), ("B", False)]),
        make_question(2, "single_correct", 5, [("C", False), ("D", True)]),
    ]

    both = QuizGrader.evaluate(questions, {"1": "A", "2": "D"}, passing_marks=60)
    assert summary(both) == {"score": 10, "total_points": 10, "percentage": 100, "passed": True}

    one = QuizGrader.evaluate(questions, {"1": "A", "2": "C"}, passing_marks=60)
    assert summary(one) == {"score": 5, "total_points": 10, "percentage": 50, "passed": False}


def test_answers_keyed_by_int_ids(single):
    assert QuizGrader.evaluate([single], {1: "B"})["score"] == 5


def test_non_mapping_payload_grades_as_unanswered(single):
    result = QuizGrader.evaluate([single], ["B"])
    assert result["score"] == 0
    assert result["responses"][0]["is_correct"] is False


def test_responses_record_each_question(single, multiple):
    result = QuizGrader.evaluate([single, multiple], {"1": "B"})
    assert result["responses"] == [
        {"question_id": 1, "answer": "B", "is_correct": True, "marks_awarded": 5},
        {"question_id": 2, "answer": None, "is_correct": False, "marks_awarded": 0},
    ]
