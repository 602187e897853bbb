"""
User model for authentication, profile and gamification state.
"""
from sqlalchemy import JSON, Boolean, Column, Date, Float, Integer, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from medlearn.db.base import Base


class User(Base):
    """User model."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    hashed_password = Column(String, nullable=True)
    role = Column(String, default="student")  # student, admin
    image = Column(String, nullable=True)
    is_active = Column(Boolean, default=True)

    profile = Column(JSON, default=dict)
    preferences = Column(JSON, default=dict)

    # Gamification
    xp = Column(Integer, default=0, nullable=False)
    level = Column(Integer, default=1, nullable=False)
    achievements = Column(JSON, default=list)
    current_streak = Column(Integer, default=0, nullable=False)
    longest_streak = Column(Integer, default=0, nullable=False)
    last_activity_date = Column(Date, nullable=True)
    daily_goal = Column(Integer, default=10, nullable=False)
    daily_progress = Column(Integer, default=0, nullable=False)
    daily_progress_date = Column(Date, nullable=True)
    total_flashcards_reviewed = Column(Integer, default=0, nullable=False)
    total_quizzes_completed = Column(Integer, default=0, nullable=False)
    total_correct_answers = Column(Integer, default=0, nullable=False)
    total_incorrect_answers = Column(Integer, default=0, nullable=False)
    average_accuracy = Column(Float, default=0, nullable=False)
    study_time = Column(Integer, default=0, nullable=False)  # minutes

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    last_login = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    cases = relationship("Case", back_populates="author", cascade="all, delete-orphan")
    ratings = relationship("Rating", back_populates="user", cascade="all, delete-orphan")
    bookmarks = relationship("Bookmark", back_populates="user", cascade="all, delete-orphan")
    quizzes = relationship("Quiz", back_populates="owner", cascade="all, delete-orphan")
    flashcard_categories = relationship(
        "FlashcardCategory", back_populates="owner", cascade="all, delete-orphan"
    )
