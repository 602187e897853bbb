"""
Quiz models: quizzes, their questions, attempts and results.
"""
from sqlalchemy import JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from medlearn.db.base import Base


class Quiz(Base):
    """Quiz model."""

    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    topic = Column(String, nullable=True, index=True)
    difficulty = Column(String, default="medium")
    is_public = Column(Boolean, default=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    owner = relationship("User", back_populates="quizzes")
    questions = relationship(
        "QuizQuestion",
        back_populates="quiz",
        cascade="all, delete-orphan",
        order_by="QuizQuestion.position",
    )
    attempts = relationship("QuizAttempt", back_populates="quiz", cascade="all, delete-orphan")
    results = relationship("QuizResult", back_populates="quiz", cascade="all, delete-orphan")

    @property
    def question_count(self) -> int:
        return len(self.questions)


class QuizQuestion(Base):
    """A single question inside a quiz."""

    __tablename__ = "quiz_questions"

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id"), nullable=False, index=True)
    position = Column(Integer, default=0)
    type = Column(String, nullable=False)  # multiple-choice, true-false, fill-in-blank, matching, saq
    question = Column(Text, nullable=False)
    options = Column(JSON, default=list)
    correct_answer = Column(JSON, nullable=False)
    explanation = Column(Text, nullable=True)
    difficulty = Column(String, default="medium")
    topic = Column(String, nullable=True)
    tags = Column(JSON, default=list)

    quiz = relationship("Quiz", back_populates="questions")


class QuizAttempt(Base):
    """An in-progress or completed run through a quiz."""

    __tablename__ = "quiz_attempts"

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    answers = Column(JSON, default=list)  # [{question_id, user_answer, is_correct, time_spent}]
    score = Column(Float, default=0)
    total_questions = Column(Integer, default=0)
    time_spent = Column(Integer, default=0)  # seconds
    is_complete = Column(Boolean, default=False)
    started_at = Column(DateTime, nullable=False)
    completed_at = Column(DateTime, nullable=True)

    quiz = relationship("Quiz", back_populates="attempts")


class QuizResult(Base):
    """Submitted result of a completed quiz."""

    __tablename__ = "quiz_results"

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    score = Column(Integer, nullable=False)  # number of correct answers
    total_questions = Column(Integer, nullable=False)
    time_spent = Column(Integer, default=0)
    answers = Column(JSON, default=list)
    completed_at = Column(DateTime, nullable=False)
    improvement = Column(String, nullable=True)
    streak = Column(Integer, default=1)

    quiz = relationship("Quiz", back_populates="results")

    @property
    def percentage_score(self) -> float:
        if not self.total_questions:
            return 0.0
        return round(self.score / self.total_questions * 100, 2)
