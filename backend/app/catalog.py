from __future__ import annotations

from typing import Dict, NamedTuple, Optional, Tuple


SCHOOL_BOARDS: Tuple[str, ...] = ("CBSE", "ICSE", "IB", "State")
GRADES: Tuple[int, ...] = (6, 7, 8, 9, 10, 11, 12)

_ALL_BOARDS = SCHOOL_BOARDS
_SECONDARY = (9, 10, 11, 12)
_MIDDLE = (6, 7, 8, 9, 10)


class Subject(NamedTuple):
    name: str
    slug: str
    description: str
    boards: Tuple[str, ...]
    grades: Tuple[int, ...]


class SyllabusTopic(NamedTuple):
    title: str
    description: str


SUBJECTS: Tuple[Subject, ...] = (
    Subject("Mathematics", "mathematics", "Explore the world of numbers, shapes, and patterns, from basic arithmetic to advanced calculus.", _ALL_BOARDS, GRADES),
    Subject("Physics", "physics", "Understand the fundamental principles of the universe, from motion and energy to light and electricity.", _ALL_BOARDS, _SECONDARY),
    Subject("Chemistry", "chemistry", "Delve into the study of matter, its properties, and how substances combine or separate.", _ALL_BOARDS, _SECONDARY),
    Subject("Biology", "biology", "Learn about living organisms, their life cycles, adaptations, and the environment they live in.", _ALL_BOARDS, _SECONDARY),
    Subject("History", "history", "Journey through time to discover the events and people that shaped our world.", _ALL_BOARDS, GRADES),
    Subject("English", "english", "Master the art of language, from grammar and composition to literature and creative writing.", _ALL_BOARDS, GRADES),
    Subject("Art", "art", "Unleash your creativity and explore various forms of visual expression.", _ALL_BOARDS, _MIDDLE),
    Subject("Languages", "languages", "Learn new languages and explore different cultures from around the world.", _ALL_BOARDS, _MIDDLE),
)

_BY_SLUG: Dict[str, Subject] = {s.slug: s for s in SUBJECTS}

SYLLABUS: Dict[str, Tuple[SyllabusTopic, ...]] = {
    "mathematics": (
        SyllabusTopic("Algebra", "Basics of variables, expressions, and equations."),
        SyllabusTopic("Geometry", "Study of shapes, sizes, positions of figures, and properties of space."),
        SyllabusTopic("Trigonometry", "Relationships between side lengths and angles of triangles."),
        SyllabusTopic("Calculus", "The mathematical study of continuous change."),
    ),
    "physics": (
        SyllabusTopic("Mechanics", "Study of motion, forces, and energy."),
        SyllabusTopic("Thermodynamics", "Heat, work, and temperature, and their relation to energy."),
        SyllabusTopic("Electromagnetism", "Interaction between electric currents and magnetic fields."),
    ),
    "chemistry": (
        SyllabusTopic("Organic Chemistry", "Study of carbon compounds."),
        SyllabusTopic("Inorganic Chemistry", "Properties and behavior of inorganic compounds."),
        SyllabusTopic("Physical Chemistry", "How matter behaves on a molecular and atomic level."),
    ),
    "biology": (
        SyllabusTopic("Cell Biology", "The study of cell structure and function."),
        SyllabusTopic("Genetics", "The study of genes, genetic variation, and heredity."),
        SyllabusTopic("Ecology", "Interactions among organisms and their environment."),
    ),
    "history": (
        SyllabusTopic("Ancient Civilizations", "A look at the earliest societies."),
        SyllabusTopic("The World Wars", "A comprehensive study of WWI and WWII."),
        SyllabusTopic("Modern History", "Events from the post-World War II era to the present."),
    ),
    "english": (
        SyllabusTopic("Grammar and Punctuation", "The rules of English language structure."),
        SyllabusTopic("Shakespearean Literature", "An analysis of Shakespeare's major works."),
        SyllabusTopic("Modern Poetry", "Exploring poems from the 20th and 21st centuries."),
    ),
    "art": (
        SyllabusTopic("Color Theory", "The science and art of using color."),
        SyllabusTopic("Sketching and Drawing", "Fundamental techniques for creating images on a surface."),
    ),
    "languages": (
        SyllabusTopic("Basic Conversation", "Learning essential phrases for everyday communication."),
        SyllabusTopic("Verb Conjugation", "Understanding how verbs change based on tense and subject."),
    ),
}


def _grade_number(grade) -> Optional[int]:
    try:
        return int(str(grade).strip())
    except (TypeError, ValueError):
        return None


def subjects_for_student(school_board: str, grade) -> Tuple[Subject, ...]:
    grade_n = _grade_number(grade)
    return tuple(s for s in SUBJECTS if school_board in s.boards and grade_n in s.grades)


def subject_by_slug(slug: str) -> Optional[Subject]:
    return _BY_SLUG.get(slug)


def syllabus_for_subject(slug: str) -> Tuple[SyllabusTopic, ...]:
    return SYLLABUS.get(slug, ())


def topic_by_title(slug: str, title: str) -> Optional[SyllabusTopic]:
    for topic in syllabus_for_subject(slug):
        if topic.title.lower() == title.strip().lower():
            return topic
    return None


def is_valid_board(board: str) -> bool:
    return board in SCHOOL_BOARDS


def is_valid_grade(grade) -> bool:
    return _grade_number(grade) in GRADES
