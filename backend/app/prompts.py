"""Prompt templates for the AI features.

Each template pairs a pydantic input model with a pydantic output model.
``render`` builds the prompt text and ``run`` sends it through an LLM client
(anything with an async ``generate(prompt, *, json_output=False)``) and
validates the answer.
"""
from __future__ import annotations

import json
import re
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator


class LLMOutputError(Exception):
    """The model answered with something that does not fit the output schema."""


class PromptStudentProfile(BaseModel):
    name: str
    age: int
    school_name: str
    school_board: str
    grade_class: str
    mbti_type: Optional[str] = None
    subjects: List[str] = Field(default_factory=list)


class TopicSummaryInput(BaseModel):
    student_profile: PromptStudentProfile
    topic: str
    syllabus: str
    learning_style: str


class TopicSummaryOutput(BaseModel):
    summary: str


class RecommendedTopicsInput(BaseModel):
    student_profile: PromptStudentProfile
    learning_data: str


class RecommendedTopicsOutput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    recommended_topics: List[str] = Field(alias="recommendedTopics")
    reasoning: str


class QuizInput(BaseModel):
    student_profile: PromptStudentProfile
    topic: str
    number_of_questions: int = Field(default=5, ge=1)


class QuizQuestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: str
    options: List[str] = Field(min_length=2)
    correct_answer: str = Field(alias="correctAnswer")

    @field_validator("correct_answer")
    @classmethod
    def _strip(cls, v: str) -> str:
        return v.strip()

    @field_validator("options")
    @classmethod
    def _strip_options(cls, v: List[str]) -> List[str]:
        return [o.strip() for o in v]

    @model_validator(mode="after")
    def _answer_in_options(self) -> "QuizQuestion":
        if self.correct_answer not in self.options:
            raise ValueError(f"correct answer {self.correct_answer!r} is not one of the options")
        return self


class QuizOutput(BaseModel):
    questions: List[QuizQuestion]


def extract_json_object(text: str) -> Dict[str, Any]:
    try:
        return json.loads(text)
    except ValueError:
        pass
    code_block = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", text)
    if code_block:
        try:
            return json.loads(code_block.group(1))
        except ValueError:
            pass
    first = text.find("{")
    last = text.rfind("}")
    if first != -1 and last > first:
        try:
            return json.loads(text[first : last + 1])
        except ValueError:
            pass
    raise LLMOutputError("LLM did not return valid JSON.")


def _profile_block(p: PromptStudentProfile, indent: str = "") -> str:
    lines = [
        f"Name: {p.name}",
        f"Age: {p.age}",
        f"School: {p.school_name} ({p.school_board})",
        f"Grade/Class: {p.grade_class}",
        f"MBTI Type: {p.mbti_type or 'Unknown'}",
        f"Subjects: {', '.join(p.subjects) if p.subjects else 'None listed'}",
    ]
    return "\n".join(indent + line for line in lines)


InT = TypeVar("InT", bound=BaseModel)
OutT = TypeVar("OutT", bound=BaseModel)


class PromptTemplate(Generic[InT, OutT]):
    name: str = ""
    input_model: Type[BaseModel]
    output_model: Type[BaseModel]
    json_output: bool = True

    def render(self, data: InT) -> str:
        raise NotImplementedError

    def parse(self, text: str) -> OutT:
        try:
            return self.output_model.model_validate(extract_json_object(text))
        except ValidationError as e:
            raise LLMOutputError(f"{self.name}: {e.error_count()} invalid field(s) in LLM output") from e

    async def run(self, client, data: InT) -> OutT:
        if not isinstance(data, self.input_model):
            data = self.input_model.model_validate(data)
        text = await client.generate(self.render(data), json_output=self.json_output)
        return self.parse(text)


class TopicSummaryPrompt(PromptTemplate[TopicSummaryInput, TopicSummaryOutput]):
    name = "topic_summary"
    input_model = TopicSummaryInput
    output_model = TopicSummaryOutput
    json_output = False

    def render(self, data: TopicSummaryInput) -> str:
        return (
            "You are an AI-powered personalized learning assistant. Your task is to provide a personalized summary "
            "of a given topic tailored to a student's learning style and syllabus.\n\n"
            "Student Profile:\n"
            f"{_profile_block(data.student_profile, '  ')}\n\n"
            f"Topic: {data.topic}\n"
            f"Syllabus: {data.syllabus}\n"
            f"Learning Style: {data.learning_style}\n\n"
            "Based on the above information, provide a concise and personalized summary of the topic that caters "
            "to the student's learning style and syllabus. Focus on key concepts and tailor the language to be "
            "appropriate for their age and grade level.\n\n"
            "Summary:"
        )

    def parse(self, text: str) -> TopicSummaryOutput:
        summary = (text or "").strip()
        if summary.lower().startswith("summary:"):
            summary = summary[len("summary:"):].strip()
        if not summary:
            raise LLMOutputError(f"{self.name}: empty summary")
        return TopicSummaryOutput(summary=summary)


class RecommendedTopicsPrompt(PromptTemplate[RecommendedTopicsInput, RecommendedTopicsOutput]):
    name = "recommended_topics"
    input_model = RecommendedTopicsInput
    output_model = RecommendedTopicsOutput

    def render(self, data: RecommendedTopicsInput) -> str:
        return (
            "You are an AI-powered personalized learning assistant. Your goal is to recommend topics for the "
            "student to study next, based on their profile and learning data.\n\n"
            "Student Profile:\n"
            f"{_profile_block(data.student_profile)}\n\n"
            f"Learning Data: {data.learning_data}\n\n"
            "Based on this information, recommend a few topics for the student to study next and explain your "
            'reasoning. Return ONLY a JSON object with "recommendedTopics" (array of strings) and "reasoning" '
            "(string)."
        )


class QuizPrompt(PromptTemplate[QuizInput, QuizOutput]):
    name = "quiz"
    input_model = QuizInput
    output_model = QuizOutput

    def render(self, data: QuizInput) -> str:
        return (
            "You are an expert quiz generator for school students.\n\n"
            "Based on the student's profile and the specified topic, generate a quiz with the specified number of "
            "questions. The quiz should be tailored to the student's learning style and grade.\n\n"
            "Student Profile:\n"
            f"{_profile_block(data.student_profile)}\n"
            f"Topic: {data.topic}\n"
            f"Number of Questions: {data.number_of_questions}\n\n"
            "Return ONLY a JSON object with the following structure:\n"
            '{"questions": [{"question": "Question text", "options": ["Option 1", "Option 2", "Option 3", '
            '"Option 4"], "correctAnswer": "Correct option"}]}\n'
            "correctAnswer must be copied exactly from options."
        )


topic_summary_prompt = TopicSummaryPrompt()
recommended_topics_prompt = RecommendedTopicsPrompt()
quiz_prompt = QuizPrompt()
