import logging

from flask import current_app

from models import db
from models.quizzes import Quiz
from models.quiz_questions import QuizQuestion
from models.quiz_options import QuizOption
from classes.validators import validate_quiz_data, validate_question_data, validate_int
from utils.helpers import clean_text

logger = logging.getLogger(__name__)


class QuizManager:
    """Authoring side of quizzes: questions, options and the cached total marks."""

    @staticmethod
    def is_owner(user, quiz_or_course):
        """Admins manage everything; instructors only their own courses."""
        if user.get("role") == "admin":
            return True
        course = quiz_or_course.course if isinstance(quiz_or_course, Quiz) else quiz_or_course
        return course is not None and course.instructor_id == user.get("user_id")

    @staticmethod
    def create_quiz(chapter, data):
        validate_quiz_data(data)

        quiz_type = data.get("type") or "quiz"
        passing_marks = data.get("passing_marks")
        assignment_marks = data.get("total_marks")
        if assignment_marks is None:
            assignment_marks = current_app.config["DEFAULT_ASSIGNMENT_MARKS"]
        max_attempts = data.get("max_attempts", current_app.config["DEFAULT_MAX_ATTEMPTS"])

        quiz = Quiz(
            course_id=chapter.course_id,
            chapter_id=chapter.id,
            title=clean_text(data["title"]),
            description=clean_text(data.get("description")),
            type=quiz_type,
            position=data.get("position") or "end_of_chapter",
            time_limit=validate_int("Time limit", data.get("time_limit"), allow_none=True),
            # quizzes derive their total from question points; assignments are marked by hand
            total_marks=validate_int("Total marks", assignment_marks, minimum=1)
            if quiz_type == "assignment" else 0,
            passing_marks=current_app.config["DEFAULT_PASSING_MARKS"]
            if passing_marks is None else int(passing_marks),
            max_attempts=validate_int("Max attempts", max_attempts, minimum=1, allow_none=True),
            is_active=True,
            order=len(chapter.quizzes) + 1,
        )

        db.session.add(quiz)
        db.session.commit()
        logger.info("Quiz %s created in chapter %s", quiz.id, chapter.id)
        return quiz

    @staticmethod
    def update_quiz(quiz, data):
        validate_quiz_data(data, partial=True)

        if "title" in data:
            quiz.title = clean_text(data["title"])
        if "description" in data:
            quiz.description = clean_text(data["description"])
        if "time_limit" in data:
            quiz.time_limit = validate_int("Time limit", data["time_limit"], allow_none=True)
        if data.get("passing_marks") is not None:
            quiz.passing_marks = int(data["passing_marks"])
        if "max_attempts" in data:
            quiz.max_attempts = validate_int("Max attempts", data["max_attempts"], minimum=1, allow_none=True)
        if data.get("position") is not None:
            quiz.position = data["position"]
        if quiz.type == "assignment" and data.get("total_marks") is not None:
            quiz.total_marks = validate_int("Total marks", data["total_marks"], minimum=1)

        # saving an edit publishes the quiz
        quiz.is_active = True
        quiz.touch()
        db.session.commit()
        return quiz

    @staticmethod
    def deactivate_quiz(quiz):
        """Hide a quiz from learners. Content is unchanged, so no retake is granted."""
        quiz.is_active = False
        db.session.commit()
        return quiz

    @staticmethod
    def delete_quiz(quiz):
        db.session.delete(quiz)
        db.session.commit()

    @staticmethod
    def build_options(question_type, options, correct_answer):
        """Option rows for a question; correctness follows correct_answer."""
        if question_type == "true_false" and not options:
            options = ["true", "false"]

        built = []
        for index, text in enumerate(options or []):
            if question_type == "multiple_correct":
                is_correct = isinstance(correct_answer, list) and text in correct_answer
            else:
                is_correct = correct_answer == text
            built.append(QuizOption(option_text=text, is_correct=is_correct, order_index=index))
        return built

    @staticmethod
    def recalculate_total_marks(quiz):
        quiz.total_marks = sum(question.points or 0 for question in quiz.questions)
        return quiz.total_marks

    @staticmethod
    def add_question(quiz, data):
        validate_question_data(data)

        question_type = data.get("type") or "single_correct"
        question = QuizQuestion(
            question_text=clean_text(data["question"]),
            question_type=question_type,
            points=int(data.get("marks") or 1),
            order_index=len(quiz.questions),
        )
        question.options = QuizManager.build_options(
            question_type, data.get("options"), data.get("correct_answer")
        )
        quiz.questions.append(question)

        QuizManager.recalculate_total_marks(quiz)
        quiz.touch()
        db.session.commit()
        return question

    @staticmethod
    def update_question(question, data):
        quiz = question.quiz
        question_type = data.get("type") or question.question_type
        existing_texts = [option.option_text for option in question.options]

        if "correct_answer" in data:
            correct_answer = data["correct_answer"]
        elif question_type == "multiple_correct":
            correct_answer = [option.option_text for option in question.correct_options]
        else:
            correct = question.correct_options
            correct_answer = correct[0].option_text if correct else None

        merged = {
            "question": data.get("question", question.question_text),
            "type": question_type,
            "marks": data.get("marks", question.points),
            "options": data.get("options", existing_texts),
            "correct_answer": correct_answer,
        }
        validate_question_data(merged)

        question.question_text = clean_text(merged["question"])
        question.question_type = question_type
        question.points = int(merged["marks"] or 1)
        question.options = QuizManager.build_options(question_type, merged["options"], correct_answer)

        QuizManager.recalculate_total_marks(quiz)
        quiz.touch()
        db.session.commit()
        return question

    @staticmethod
    def delete_question(question):
        quiz = question.quiz
        quiz.questions.remove(question)
        for index, remaining in enumerate(quiz.questions):
            remaining.order_index = index

        QuizManager.recalculate_total_marks(quiz)
        quiz.touch()
        db.session.commit()

    @staticmethod
    def sync_total_marks(quiz):
        """Repair a drifted total_marks cache. Returns True when it was rewritten."""
        if quiz.type != "quiz" or not quiz.questions:
            return False
        actual = sum(question.points or 0 for question in quiz.questions)
        if actual == quiz.total_marks:
            return False
        logger.warning("Quiz %s total_marks drifted (%s stored, %s actual)", quiz.id, quiz.total_marks, actual)
        quiz.total_marks = actual
        return True

    @staticmethod
    def serialize_question(question, include_answer=True):
        """Client shape: {id, question, type, marks, options: [text], correct_answer}."""
        payload = {
            "id": question.id,
            "question": question.question_text,
            "type": question.question_type,
            "marks": question.points,
            "options": [option.option_text for option in question.options],
        }
        if include_answer:
            correct = question.correct_options
            if question.question_type == "multiple_correct":
                payload["correct_answer"] = [option.option_text for option in correct]
            else:
                payload["correct_answer"] = correct[0].option_text if correct else None
        return payload

    @staticmethod
    def serialize_quiz(quiz, include_answers=True):
        return {
            **quiz.to_dict(),
            "questions": [QuizManager.serialize_question(q, include_answers) for q in quiz.questions],
        }

    @staticmethod
    def list_chapter_quizzes(chapter_id, include_answers=True):
        quizzes = (
            Quiz.query
            .filter_by(chapter_id=chapter_id)
            .order_by(Quiz.created_at.desc(), Quiz.id.desc())
            .all()
        )

        listing = []
        drifted = False
        for quiz in quizzes:
            question_count = quiz.question_count
            is_ready = quiz.is_active
            questions = []

            if quiz.type == "quiz":
                questions = [QuizManager.serialize_question(q, include_answers) for q in quiz.questions]
                is_ready = is_ready and question_count > 0
                drifted = QuizManager.sync_total_marks(quiz) or drifted

            listing.append({
                **quiz.to_dict(),
                "is_ready": is_ready,
                "question_count": question_count,
                "questions": questions,
            })

        if drifted:
            db.session.commit()
        return listing
