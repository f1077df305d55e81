from __future__ import annotations
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# 6-13, where 13 is undergraduate
MIN_GRADE = 6
MAX_GRADE = 13
INTEREST_PATTERN = r"^[a-zA-Z0-9\s&-]+$"


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AIConfig(_Body):
    """Per-request override of the LLM endpoint, sent by the settings panel."""
    provider: Optional[str] = Field(default=None, max_length=50)
    model: Optional[str] = Field(default=None, max_length=200)
    base_url: Optional[str] = Field(default=None, alias="baseUrl", max_length=2048)
    api_key: Optional[str] = Field(default=None, alias="apiKey", max_length=500)


class _Personalized(_Body):
    grade_level: Optional[int] = Field(default=None, alias="gradeLevel", ge=MIN_GRADE, le=MAX_GRADE)
    interest: Optional[str] = Field(default=None, min_length=1, max_length=50, pattern=INTEREST_PATTERN)
    ai_config: Optional[AIConfig] = Field(default=None, alias="aiConfig")


class PersonalizeRequest(_Personalized):
    text: str = Field(min_length=1, max_length=50000)
    grade_level: int = Field(alias="gradeLevel", ge=MIN_GRADE, le=MAX_GRADE)


class MaterialRequest(_Personalized):
    """Body shared by the slides, mind map and audio lesson generators."""
    content: str = Field(min_length=1, max_length=50000)
    material_title: str = Field(alias="materialTitle", min_length=1, max_length=200)


class AudioDiscussionRequest(_Body):
    title: Optional[str] = Field(default=None, max_length=200)
    content: str = Field(min_length=1, max_length=50000)
    ai_config: Optional[AIConfig] = Field(default=None, alias="aiConfig")


class MnemonicRequest(_Personalized):
    content: str = Field(min_length=1, max_length=50000)


class SectionQuestionRequest(_Personalized):
    section_title: str = Field(alias="sectionTitle", min_length=1, max_length=200)
    section_content: str = Field(alias="sectionContent", min_length=1, max_length=50000)


class Section(_Body):
    title: str = Field(default="", max_length=200)
    content: str = ""


class QuizGenerationRequest(_Personalized):
    material_title: str = Field(alias="materialTitle", min_length=1, max_length=200)
    sections: List[Section] = Field(min_length=1, max_length=50)
    total_questions: Optional[int] = Field(default=None, alias="totalQuestions", ge=5, le=20)


class SubmittedQuestion(_Body):
    id: str
    correct_answer: int = Field(alias="correctAnswer", ge=0, le=3)
    difficulty: Literal["easy", "medium", "hard"]
    explanation: Optional[str] = None


class QuizSubmission(_Body):
    title: Optional[str] = Field(default=None, max_length=200)
    questions: List[SubmittedQuestion] = Field(min_length=1, max_length=50)
    answers: Dict[str, int]
    ai_config: Optional[AIConfig] = Field(default=None, alias="aiConfig")

    @field_validator("answers")
    @classmethod
    def _answers_in_range(cls, value: Dict[str, int]) -> Dict[str, int]:
        for qid, answer in value.items():
            if answer < 0 or answer > 3:
                raise ValueError(f"answer for {qid} must be between 0 and 3")
        return value


class TopicRequest(_Body):
    """Body for the example and practice generators."""
    topic: str = Field(min_length=1, max_length=200)
    difficulty: Optional[int] = Field(default=None, ge=MIN_GRADE, le=MAX_GRADE)
    interest: Optional[str] = Field(default=None, min_length=1, max_length=50, pattern=INTEREST_PATTERN)
    ai_config: Optional[AIConfig] = Field(default=None, alias="aiConfig")


class ContextMessage(_Body):
    role: Literal["user", "assistant"]
    content: str = Field(max_length=2000)


class ConversationalLearnRequest(_Body):
    topic: Optional[str] = Field(default=None, max_length=200)
    question: str = Field(min_length=1, max_length=2000)
    difficulty: int = Field(default=8, ge=MIN_GRADE, le=MAX_GRADE)
    interest: Optional[str] = Field(default=None, min_length=1, max_length=50, pattern=INTEREST_PATTERN)
    context: Optional[List[ContextMessage]] = Field(default=None, max_length=10)
    ai_config: Optional[AIConfig] = Field(default=None, alias="aiConfig")


class AnalyzeTextRequest(_Body):
    text: str = Field(min_length=1, max_length=180000)
    ai_config: Optional[AIConfig] = Field(default=None, alias="aiConfig")
