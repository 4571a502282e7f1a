from flask_sqlalchemy import SQLAlchemy

# Initialize SQLAlchemy
db = SQLAlchemy()

# Import models
from models.users import User

from models.courses import Course
from models.chapters import Chapter

from models.quizzes import Quiz
from models.quiz_questions import QuizQuestion
from models.quiz_options import QuizOption
from models.quiz_attempts import QuizAttempt
from models.quiz_attempts_answers import QuizAttemptAnswer

from models.badges import Badge, UserBadge
from models.user_xp import UserXP
