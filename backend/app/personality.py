"""MBTI-style personality questionnaire used during onboarding.

The question bank and the type table are static, read-only data. An attempt
is an ``AnswerSet`` plus a cursor (``QuizState``); classification always
recomputes the tallies from the recorded answers, so re-answering a question
before finishing is a plain overwrite.
"""
from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, NamedTuple, Optional, Sequence, Tuple


class PersonalityError(Exception):
    """Base class for questionnaire errors."""


class InvalidIndexError(PersonalityError):
    def __init__(self, index: int, size: int) -> None:
        super().__init__(f"question index {index} is outside [0, {size})")
        self.index = index
        self.size = size


class IncompleteAnswersError(PersonalityError):
    def __init__(self, missing: Sequence[int]) -> None:
        super().__init__(f"missing answers for questions: {list(missing)}")
        self.missing = list(missing)


class UnknownTypeCodeError(PersonalityError):
    def __init__(self, code: str) -> None:
        super().__init__(f"unknown personality type code: {code!r}")
        self.code = code


class Dimension(str, Enum):
    EI = "EI"
    SN = "SN"
    TF = "TF"
    JP = "JP"

    @property
    def first(self) -> str:
        return self.value[0]

    @property
    def second(self) -> str:
        return self.value[1]


class Choice(str, Enum):
    A = "A"
    B = "B"


# Order in which letters appear in a type code
DIMENSION_ORDER: Tuple[Dimension, ...] = (Dimension.EI, Dimension.SN, Dimension.TF, Dimension.JP)


class Question(NamedTuple):
    dimension: Dimension
    prompt: str
    option_a: str
    option_b: str


class TypeProfile(NamedTuple):
    name: str
    description: str


QUESTION_BANK: Tuple[Question, ...] = (
    Question(Dimension.EI, "At a party, do you:", "Interact with many, including strangers", "Interact with a few, known to you"),
    Question(Dimension.SN, "Are you more:", "Realistic than speculative", "Speculative than realistic"),
    Question(Dimension.TF, "Which appeals to you more:", "Consistency of thought", "Harmonious human relationships"),
    Question(Dimension.JP, "Do you prefer to:", "Make decisions quickly", "Keep your options open"),
    Question(Dimension.EI, "When the phone rings, do you:", "Hasten to get to it first", "Hope someone else will answer"),
    Question(Dimension.SN, "Do you tend to be more interested in:", "What is actual", "What is possible"),
    Question(Dimension.TF, "Are you more often a:", "Cool-headed person", "Warm-hearted person"),
    Question(
        Dimension.JP,
        "In your daily work, do you:",
        "Prefer to plan your work, so you can be sure of the result",
        "Like to do things as they come along",
    ),
)


TYPE_PROFILES: Mapping[str, TypeProfile] = MappingProxyType({
    "ISTJ": TypeProfile("The Inspector", "Practical and fact-minded individuals, whose reliability cannot be doubted."),
    "ISFJ": TypeProfile("The Protector", "Very dedicated and warm protectors, always ready to defend their loved ones."),
    "INFJ": TypeProfile("The Advocate", "Quiet and mystical, yet very inspiring and tireless idealists."),
    "INTJ": TypeProfile("The Architect", "Imaginative and strategic thinkers, with a plan for everything."),
    "ISTP": TypeProfile("The Crafter", "Bold and practical experimenters, masters of all kinds of tools."),
    "ISFP": TypeProfile("The Artist", "Flexible and charming artists, always ready to explore and experience something new."),
    "INFP": TypeProfile("The Mediator", "Poetic, kind, and altruistic people, always eager to help a good cause."),
    "INTP": TypeProfile("The Thinker", "Innovative inventors with an unquenchable thirst for knowledge."),
    "ESTP": TypeProfile("The Dynamo", "Smart, energetic, and very perceptive people, who truly enjoy living on the edge."),
    "ESFP": TypeProfile("The Performer", "Spontaneous, energetic, and enthusiastic people; life is never boring around them."),
    "ENFP": TypeProfile("The Champion", "Enthusiastic, creative, and sociable free spirits, who can always find a reason to smile."),
    "ENTP": TypeProfile("The Debater", "Smart and curious thinkers who cannot resist an intellectual challenge."),
    "ESTJ": TypeProfile("The Executive", "Excellent administrators, unsurpassed at managing things or people."),
    "ESFJ": TypeProfile("The Consul", "Extraordinarily caring, social, and popular people, always eager to help."),
    "ENFJ": TypeProfile("The Protagonist", "Charismatic and inspiring leaders, able to mesmerize their listeners."),
    "ENTJ": TypeProfile("The Commander", "Bold, imaginative, and strong-willed leaders, always finding a way or making one."),
})


def all_type_codes() -> Tuple[str, ...]:
    """Every syntactically valid code, in EI/SN/TF/JP order."""
    codes = [""]
    for dim in DIMENSION_ORDER:
        codes = [prefix + letter for prefix in codes for letter in (dim.first, dim.second)]
    return tuple(codes)


def _check_table_complete() -> None:
    missing = set(all_type_codes()) - set(TYPE_PROFILES)
    if missing:
        raise RuntimeError(f"type profile table is missing codes: {sorted(missing)}")


_check_table_complete()


def _as_choice(value) -> Choice:
    if isinstance(value, Choice):
        return value
    try:
        return Choice(str(value).upper())
    except ValueError:
        raise ValueError(f"choice must be 'A' or 'B', got {value!r}") from None


class AnswerSet:
    """Choices recorded for one attempt, keyed by question index."""

    def __init__(self, size: int, answers: Optional[Mapping[int, Choice]] = None) -> None:
        if size < 0:
            raise ValueError("size must be non-negative")
        self.size = size
        self._answers: Dict[int, Choice] = {}
        for index, choice in (answers or {}).items():
            self.record_answer(index, choice)

    def record_answer(self, index: int, choice) -> None:
        if not 0 <= index < self.size:
            raise InvalidIndexError(index, self.size)
        self._answers[index] = _as_choice(choice)

    def is_complete(self) -> bool:
        return all(i in self._answers for i in range(self.size))

    def missing(self) -> list[int]:
        return [i for i in range(self.size) if i not in self._answers]

    def copy(self) -> "AnswerSet":
        return AnswerSet(self.size, self._answers)

    def get(self, index: int) -> Optional[Choice]:
        return self._answers.get(index)

    def __getitem__(self, index: int) -> Choice:
        return self._answers[index]

    def __contains__(self, index: object) -> bool:
        return index in self._answers

    def __len__(self) -> int:
        return len(self._answers)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._answers))

    def as_dict(self) -> Dict[int, str]:
        return {i: self._answers[i].value for i in sorted(self._answers)}


class QuizState(NamedTuple):
    answers: AnswerSet
    cursor: int = 0

    @classmethod
    def start(cls, questions: Sequence[Question] = QUESTION_BANK) -> "QuizState":
        return cls(AnswerSet(len(questions)), 0)

    @property
    def is_complete(self) -> bool:
        return self.answers.is_complete()


def answer(state: QuizState, choice, index: Optional[int] = None) -> QuizState:
    """Record ``choice`` at ``index`` (default: the cursor) and move past it.

    The given state is left untouched. The cursor stops at the last question.
    """
    target = state.cursor if index is None else index
    answers = state.answers.copy()
    answers.record_answer(target, choice)
    last = max(answers.size - 1, 0)
    return QuizState(answers, min(target + 1, last))


def go_to(state: QuizState, index: int) -> QuizState:
    if not 0 <= index < state.answers.size:
        raise InvalidIndexError(index, state.answers.size)
    return QuizState(state.answers, index)


def classify(questions: Sequence[Question], answers) -> str:
    """Tally answers per dimension and return the 4-letter type code.

    ``answers`` is an ``AnswerSet`` or any mapping of index to choice and must
    cover every question. Ties go to the first letter of the pair.
    """
    missing = [i for i in range(len(questions)) if i not in answers]
    if missing or (isinstance(answers, AnswerSet) and answers.size != len(questions)):
        raise IncompleteAnswersError(missing)

    counts = {letter: 0 for dim in DIMENSION_ORDER for letter in dim.value}
    for index, question in enumerate(questions):
        dim = Dimension(question.dimension)
        if _as_choice(answers[index]) is Choice.A:
            counts[dim.first] += 1
        else:
            counts[dim.second] += 1

    return "".join(
        dim.first if counts[dim.first] >= counts[dim.second] else dim.second
        for dim in DIMENSION_ORDER
    )


def lookup(code: str) -> TypeProfile:
    try:
        return TYPE_PROFILES[code]
    except (KeyError, TypeError):
        raise UnknownTypeCodeError(code) from None


def learning_style_for(code: Optional[str]) -> str:
    # Sensing types get hands-on material, everyone else diagrams
    if code and "S" in code:
        return "Kinesthetic"
    return "Visual"
