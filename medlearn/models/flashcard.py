"""
Flashcard models: categories, cards and study sessions.
"""
from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from medlearn.db.base import Base


class FlashcardCategory(Base):
    """Flashcard category (deck) model."""

    __tablename__ = "flashcard_categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    color = Column(String, default="#4f46e5")
    icon = Column(String, default="book")
    is_public = Column(Boolean, default=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    flashcard_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    owner = relationship("User", back_populates="flashcard_categories")
    flashcards = relationship("Flashcard", back_populates="category", cascade="all, delete-orphan")


class Flashcard(Base):
    """Flashcard model with spaced-repetition state."""

    __tablename__ = "flashcards"

    id = Column(Integer, primary_key=True, index=True)
    question = Column(Text, nullable=False)
    answer = Column(Text, nullable=False)
    category_id = Column(Integer, ForeignKey("flashcard_categories.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    tags = Column(JSON, default=list)
    difficulty = Column(String, default="medium")  # easy, medium, hard
    confidence_level = Column(Integer, default=3, nullable=False)
    next_review_date = Column(DateTime, nullable=False)
    last_reviewed = Column(DateTime, nullable=True)
    review_count = Column(Integer, default=0, nullable=False)
    is_public = Column(Boolean, default=False)
    set_id = Column(String, nullable=True, index=True)
    topic_name = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    category = relationship("FlashcardCategory", back_populates="flashcards")


class FlashcardSession(Base):
    """A recorded flashcard study session."""

    __tablename__ = "flashcard_sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("flashcard_categories.id"), nullable=True)
    set_id = Column(String, nullable=True)
    topic_name = Column(String, nullable=True)
    cards_studied = Column(Integer, default=0, nullable=False)
    correct_answers = Column(Integer, default=0, nullable=False)
    incorrect_answers = Column(Integer, default=0, nullable=False)
    skipped_cards = Column(Integer, default=0, nullable=False)
    total_time_spent = Column(Integer, default=0, nullable=False)  # seconds
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
