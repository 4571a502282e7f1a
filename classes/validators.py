# Payload validation for quiz authoring. Every check raises ValueError.

from models.quizzes import QUIZ_TYPES, QUIZ_POSITIONS
from models.quiz_questions import QUESTION_TYPES


def validate_length(field_name, value, max_length):
    if value is not None and len(value) > max_length:
        raise ValueError(f"{field_name} must be {max_length} characters or fewer.")


def validate_required(field_name, value):
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError(f"{field_name} is required.")


def validate_int(field_name, value, minimum=None, maximum=None, allow_none=False):
    """Return value as an int, checking bounds."""
    if value is None:
        if allow_none:
            return None
        raise ValueError(f"{field_name} is required.")
    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be a whole number.")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field_name} must be a whole number.")
    if minimum is not None and number < minimum:
        raise ValueError(f"{field_name} must be at least {minimum}.")
    if maximum is not None and number > maximum:
        raise ValueError(f"{field_name} must be at most {maximum}.")
    return number


def validate_choice(field_name, value, choices):
    if value not in choices:
        raise ValueError(f"{field_name} must be one of: {', '.join(choices)}.")


def validate_quiz_data(data, partial=False):
    if not partial or "title" in data:
        validate_required("Title", data.get("title"))
        validate_length("Title", data.get("title"), 255)
    if data.get("type") is not None:
        validate_choice("Type", data.get("type"), QUIZ_TYPES)
    if data.get("position") is not None:
        validate_choice("Position", data.get("position"), QUIZ_POSITIONS)
    if data.get("passing_marks") is not None:
        validate_int("Passing marks", data.get("passing_marks"), minimum=0, maximum=100)
    if data.get("max_attempts") is not None:
        validate_int("Max attempts", data.get("max_attempts"), minimum=1)
    if data.get("time_limit") is not None:
        validate_int("Time limit", data.get("time_limit"), minimum=1)


def validate_question_data(data, partial=False):
    """
    Check a question payload:
    {"question": str, "type": str, "marks": int, "options": [str], "correct_answer": str | [str]}
    """
    if not partial or "question" in data:
        validate_required("Question", data.get("question"))

    question_type = data.get("type") or "single_correct"
    validate_choice("Question type", question_type, QUESTION_TYPES)

    if data.get("marks") is not None:
        validate_int("Marks", data.get("marks"), minimum=1)

    options = data.get("options")
    if options is not None:
        if not isinstance(options, list) or not all(isinstance(o, str) for o in options):
            raise ValueError("'options' must be a list of strings.")
        if len(set(options)) != len(options):
            raise ValueError("Options must be unique.")

    correct_answer = data.get("correct_answer")
    if question_type == "multiple_correct":
        if correct_answer is not None and not isinstance(correct_answer, list):
            raise ValueError("'correct_answer' must be a list for multiple_correct questions.")
    elif question_type == "true_false":
        if correct_answer is not None and correct_answer not in ("true", "false"):
            raise ValueError("'correct_answer' must be 'true' or 'false'.")
    elif correct_answer is not None and not isinstance(correct_answer, str):
        raise ValueError("'correct_answer' must be a string.")

    if question_type != "true_false" and not partial and not options:
        raise ValueError("Choice questions need at least two options.")
    if options is not None and question_type != "true_false" and len(options) < 2:
        raise ValueError("Choice questions need at least two options.")
