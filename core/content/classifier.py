"""
Content-type detection for incoming prompts.

Case-insensitive substring match against a fixed keyword table. Each
group carries a priority (lower number wins); when several groups tie on
the best priority, the one declared first in KEYWORD_PRIORITY wins.
Pure and deterministic: no I/O, no model call.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import AbstractSet, Optional, Tuple


class ContentType(str, Enum):
    LESSON_PLAN = "lessonPlan"
    ASSIGNMENT = "assignment"
    QUIZ = "quiz"
    LECTURE = "lecture"
    PRESENTATION = "presentation"
    DOCUMENT = "document"
    DEFAULT = "default"


@dataclass(frozen=True)
class KeywordGroup:
    content_type: ContentType
    keywords: Tuple[str, ...]
    priority: int


KEYWORD_PRIORITY: Tuple[KeywordGroup, ...] = (
    KeywordGroup(ContentType.LESSON_PLAN, ("lesson plan",), 1),
    KeywordGroup(ContentType.ASSIGNMENT, ("assignment",), 2),
    KeywordGroup(ContentType.QUIZ, ("quiz", "quizzes"), 2),
    KeywordGroup(ContentType.LECTURE, ("lecture",), 3),
    KeywordGroup(ContentType.PRESENTATION, ("presentation", "slide deck", "slides"), 4),
    KeywordGroup(ContentType.DOCUMENT, ("document", "report", "research paper", "essay"), 5),
)


def classify(
    prompt: str,
    allowed: Optional[AbstractSet[ContentType]] = None,
) -> ContentType:
    """Return the highest-priority content type mentioned in `prompt`.

    If `allowed` is given, groups whose type is not in it are ignored.
    Falls back to ContentType.DEFAULT when nothing matches.
    """
    text = prompt.lower()
    best: Optional[KeywordGroup] = None

    for group in KEYWORD_PRIORITY:
        if allowed is not None and group.content_type not in allowed:
            continue
        if best is not None and group.priority >= best.priority:
            continue
        if any(keyword in text for keyword in group.keywords):
            best = group

    return best.content_type if best is not None else ContentType.DEFAULT
