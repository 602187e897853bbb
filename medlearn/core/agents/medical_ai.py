"""
Medical education assistant backed by an OpenAI chat model.

Used for free-form prompts, the tutor chat, and generating quiz questions,
clinical cases and flashcards.
"""
import json
import logging
import re
from typing import Any, Dict, Iterator, List, Optional

from langchain_core.messages import HumanMessage, SystemMessage

from medlearn.core.agents.prompts import (
    CASE_SYSTEM_PROMPT,
    CASE_USER_PROMPT,
    FLASHCARD_SOURCE_PROMPT,
    FLASHCARD_SYSTEM_PROMPT,
    FLASHCARD_USER_PROMPT,
    MEDICAL_FRAMING_PROMPT,
    QUESTION_FORMATS,
    QUESTION_SYSTEM_PROMPT,
    QUESTION_USER_PROMPT,
    TUTOR_CONTEXT_PROMPT,
    TUTOR_SYSTEM_PROMPT,
)
from medlearn.core.config import settings
from medlearn.core.llm_config import LLMFactory

logger = logging.getLogger(__name__)
CASE_REQUIRED_FIELDS = ["title", "description", "content", "category", "answers"]


class AIResponseError(ValueError):
    """The model replied with something we could not use."""


def extract_json(response_text: str) -> Any:
    """
    Parse JSON out of a model reply, tolerating markdown code fences and
    prose around the payload.

    Raises:
        AIResponseError: If no JSON value can be parsed
    """
    text = response_text.strip()
    if "```json" in text:
        start = text.find("```json") + 7
        end = text.find("```", start)
        text = text[start:end if end != -1 else None].strip()
    elif "```" in text:
        start = text.find("```") + 3
        end = text.find("```", start)
        text = text[start:end if end != -1 else None].strip()

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        match = re.search(r"(\[.*\]|\{.*\})", text, re.DOTALL)
        if match:
            try:
                return json.loads(match.group(1))
            except json.JSONDecodeError:
                pass
    raise AIResponseError("Failed to parse AI response as JSON")


class MedicalAIAgent:
    """Thin wrapper that owns the prompts and parses the model's replies."""

    def __init__(self, llm=None):
        self._llm = llm

    @property
    def llm(self):
        if self._llm is None:
            self._llm = LLMFactory.create_llm(tracing_project="medlearn-ai")
        return self._llm

    def _invoke(self, system_prompt: Optional[str], user_prompt: str) -> str:
        messages = []
        if system_prompt:
            messages.append(SystemMessage(content=system_prompt))
        messages.append(HumanMessage(content=user_prompt))
        response = self.llm.invoke(messages)
        return str(response.content)

    # ============= Free-form =============

    def complete(self, prompt: str) -> str:
        """Answer a prompt wrapped in the medical education framing."""
        return self._invoke(None, MEDICAL_FRAMING_PROMPT.format(prompt=prompt))

    def stream(self, prompt: str) -> Iterator[str]:
        """Yield the framed answer chunk by chunk."""
        messages = [HumanMessage(content=MEDICAL_FRAMING_PROMPT.format(prompt=prompt))]
        for chunk in self.llm.stream(messages):
            if chunk.content:
                yield str(chunk.content)

    def chat(self, message: str, context: Optional[str] = None) -> str:
        system_prompt = TUTOR_SYSTEM_PROMPT
        if context:
            system_prompt = f"{system_prompt}\n\n{TUTOR_CONTEXT_PROMPT.format(context=context)}"
        return self._invoke(system_prompt, message)

    # ============= Generation =============

    def generate_questions(
        self,
        topic: str,
        question_type: str,
        difficulty: str,
        count: int,
        description: str = "",
    ) -> List[Dict[str, Any]]:
        """
        Generate quiz questions of one type.

        Args:
            topic: Subject of the questions
            question_type: multiple-choice, true-false or saq
            difficulty: beginner, intermediate or advanced
            count: Number of questions to request
            description: Optional quiz description used as extra context

        Returns:
            List of question dicts with question, correct_answer and type keys

        Raises:
            AIResponseError: If the reply holds no usable questions
        """
        context = ""
        if description:
            context = f"Quiz description: {description}\nGenerate questions relevant to this context."
        user_prompt = QUESTION_USER_PROMPT.format(
            count=count,
            question_type=question_type,
            topic=topic,
            difficulty=difficulty,
            context=context,
            format=QUESTION_FORMATS[question_type].format(difficulty=difficulty, topic=topic),
        )
        logger.info(f"Generating {count} {question_type} questions on '{topic}'")

        data = extract_json(self._invoke(QUESTION_SYSTEM_PROMPT, user_prompt))
        if isinstance(data, dict) and isinstance(data.get("questions"), list):
            data = data["questions"]
        if not isinstance(data, list):
            raise AIResponseError("Expected a list of questions")

        questions = []
        for item in data:
            if not isinstance(item, dict) or not item.get("question") or "correct_answer" not in item:
                continue
            item.setdefault("type", question_type)
            item.setdefault("difficulty", difficulty)
            item.setdefault("topic", topic)
            item.setdefault("options", [])
            item.setdefault("tags", [])
            questions.append(item)

        if not questions:
            raise AIResponseError("AI did not generate any valid questions")
        return questions[:count]

    def generate_case(
        self,
        specialty: str,
        difficulty: str = "intermediate",
        additional_instructions: str = "",
        include_images: bool = False,
        num_questions: int = 3,
    ) -> Dict[str, Any]:
        """Generate a clinical case with questions and answers."""
        extra = []
        if additional_instructions:
            extra.append(f"- {additional_instructions}")
        if include_images:
            extra.append("- Include descriptions of relevant medical images that would help with this case")
        user_prompt = CASE_USER_PROMPT.format(
            specialty=specialty,
            difficulty=difficulty,
            num_questions=num_questions,
            extra="\n".join(extra),
        )
        logger.info(f"Generating {difficulty} case for specialty '{specialty}'")

        case = extract_json(self._invoke(CASE_SYSTEM_PROMPT, user_prompt))
        if not isinstance(case, dict):
            raise AIResponseError("Expected a case object")

        for field in CASE_REQUIRED_FIELDS:
            if not case.get(field):
                raise AIResponseError(f"Generated case is missing required field: {field}")
        answers = case["answers"]
        if not isinstance(answers, list) or not all(
            isinstance(a, dict) and a.get("question") and a.get("answer") for a in answers
        ):
            raise AIResponseError("Each answer must have a question and answer field")

        case.setdefault("tags", [])
        case.setdefault("specialties", [specialty])
        case.setdefault("media_urls", [])
        case.setdefault("difficulty", difficulty)
        case["title"] = str(case["title"])[:100]
        case["description"] = str(case["description"])[:500]
        return case

    def generate_flashcards(
        self,
        topic: Optional[str],
        num_cards: int,
        difficulty: str = "medium",
        source_text: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Generate flashcards on a topic or from extracted document text.

        Items without both a question and an answer are dropped.
        """
        source = ""
        if source_text:
            source = FLASHCARD_SOURCE_PROMPT.format(text=source_text[:settings.MAX_SOURCE_CHARS])
        user_prompt = FLASHCARD_USER_PROMPT.format(
            num_cards=num_cards,
            topic=topic or "the provided document",
            difficulty=difficulty,
            source=source,
        )
        logger.info(f"Generating {num_cards} flashcards on '{topic or 'document'}'")

        data = extract_json(self._invoke(FLASHCARD_SYSTEM_PROMPT, user_prompt))
        if isinstance(data, dict) and isinstance(data.get("flashcards"), list):
            data = data["flashcards"]
        if not isinstance(data, list) or not data:
            raise AIResponseError("AI did not generate valid flashcards")

        cards = []
        for item in data:
            if not isinstance(item, dict):
                continue
            question = str(item.get("question") or "").strip()
            answer = str(item.get("answer") or "").strip()
            if not question or not answer:
                logger.warning("Skipping generated flashcard without question or answer")
                continue
            tags = item.get("tags") if isinstance(item.get("tags"), list) else []
            cards.append({"question": question, "answer": answer, "tags": tags})
        return cards[:num_cards]


def get_ai_agent() -> MedicalAIAgent:
    """FastAPI dependency returning the assistant."""
    return MedicalAIAgent()
