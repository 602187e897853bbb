"""Models module - Import all models here for Alembic."""
from medlearn.db.base import Base
from medlearn.models.user import User
from medlearn.models.case import Case, Rating, Comment, Bookmark
from medlearn.models.quiz import Quiz, QuizQuestion, QuizAttempt, QuizResult
from medlearn.models.flashcard import FlashcardCategory, Flashcard, FlashcardSession

__all__ = ["Base", "User", "Case", "Rating", "Comment", "Bookmark", "Quiz", "QuizQuestion", "QuizAttempt", "QuizResult", "FlashcardCategory", "Flashcard", "FlashcardSession"]
