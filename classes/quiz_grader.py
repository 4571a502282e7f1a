import logging
import math

logger = logging.getLogger(__name__)

SINGLE_CORRECT = "single_correct"
MULTIPLE_CORRECT = "multiple_correct"
TRUE_FALSE = "true_false"

TRUE_FALSE_LITERALS = ("true", "false")


class QuizGrader:
    """
    Scores a learner's answer map against a quiz's questions.

    Pure: no queries, no writes. Works on anything shaped like a QuizQuestion
    (``id``, ``question_type``, ``points``, ``options`` with ``option_text``
    and ``is_correct``).
    """

    @staticmethod
    def percentage(score, total_points):
        """Whole-number percentage, halves rounded up."""
        if not total_points or total_points <= 0:
            return 0
        return int(math.floor(score / total_points * 100 + 0.5))

    @staticmethod
    def lookup_answer(answers, question_id):
        """JSON bodies key answers by string ids; fall back to the raw id."""
        key = str(question_id)
        if key in answers:
            return answers[key]
        return answers.get(question_id)

    @staticmethod
    def normalize_answer(question_type, value, question_id=None):
        """
        Coerce a submitted value to the shape its question type expects.

        single_correct / true_false -> str, multiple_correct -> list.
        Returns None when the value cannot be graded; the question then
        earns nothing.
        """
        if value is None:
            return None

        if question_type == MULTIPLE_CORRECT:
            if isinstance(value, (list, tuple)):
                return list(value)
            logger.warning("Question %s expects a list of options, got %s; scoring as incorrect",
                           question_id, type(value).__name__)
            return None

        if question_type in (SINGLE_CORRECT, TRUE_FALSE):
            if not isinstance(value, str):
                logger.warning("Question %s expects a single option text, got %s; scoring as incorrect",
                               question_id, type(value).__name__)
                return None
            if question_type == TRUE_FALSE and value not in TRUE_FALSE_LITERALS:
                logger.warning("Question %s expects 'true' or 'false', got %r; scoring as incorrect",
                               question_id, value)
                return None
            return value

        logger.warning("Question %s has unsupported type %r; scoring as incorrect", question_id, question_type)
        return None

    @staticmethod
    def is_correct(question, answer):
        """Compare an already normalized answer with the question's correct options."""
        if answer is None:
            return False

        correct_texts = [option.option_text for option in question.options if option.is_correct]

        if question.question_type == MULTIPLE_CORRECT:
            return len(correct_texts) == len(answer) and all(text in answer for text in correct_texts)

        if question.question_type in (SINGLE_CORRECT, TRUE_FALSE):
            # first correct option wins if an author marked several
            return bool(correct_texts) and answer == correct_texts[0]

        return False

    @staticmethod
    def evaluate(questions, answers, passing_marks=0):
        """
        Grade a submission.

        Returns a dict with ``score``, ``total_points``, ``percentage``,
        ``passed`` and ``responses`` (one entry per question, for storage).
        """
        if answers is None:
            answers = {}
        if not isinstance(answers, dict):
            logger.warning("Answer payload is %s, not a mapping; grading as unanswered", type(answers).__name__)
            answers = {}

        score = 0
        total_points = 0
        responses = []

        for question in questions:
            points = question.points or 0
            total_points += points

            submitted = QuizGrader.lookup_answer(answers, question.id)
            normalized = QuizGrader.normalize_answer(question.question_type, submitted, question.id)
            correct = QuizGrader.is_correct(question, normalized)

            if correct:
                score += points

            responses.append({
                "question_id": question.id,
                "answer": submitted,
                "is_correct": correct,
                "marks_awarded": points if correct else 0,
            })

        percentage = QuizGrader.percentage(score, total_points)

        return {
            "score": score,
            "total_points": total_points,
            "percentage": percentage,
            "passed": percentage >= (passing_marks or 0),
            "responses": responses,
        }
