"""Intent interpretation for voice commands.

A page's command table is an ordered list of regex rules. Rules are
evaluated by category (navigation, destructive/clear, submission, focus
change, page action); within a category they keep table order. The first
rule that matches and builds an Intent wins. With no match the utterance
is dictated into the focused field.

interpret() is pure: same transcript, focus and table give the same Intent.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable

from voxmail.voice.models import FieldKind, FocusContext, Intent, PageName
from voxmail.voice.parser.entity_extractor import spoken_to_email


class RuleCategory(IntEnum):
    """Evaluation order of command rules. Lower runs first."""

    NAVIGATION = 1
    DESTRUCTIVE = 2
    SUBMISSION = 3
    FOCUS = 4
    ACTION = 5


@dataclass(frozen=True)
class Utterance:
    """A final transcript, trimmed, with its lower-cased form for matching."""

    text: str
    lower: str

    @classmethod
    def of(cls, transcript: str) -> Utterance:
        text = transcript.strip()
        return cls(text=text, lower=text.lower())

    def segment(self, start: int, end: int) -> str:
        """Original-case text for a span of ``lower``.

        Falls back to the lower-cased text when lower-casing changed the
        length (a few non-ASCII letters do).
        """
        source = self.text if len(self.text) == len(self.lower) else self.lower
        return source[start:end]

    def original(self, match: re.Match[str], group: int | str = 1) -> str:
        """Original-case text of a group matched against ``lower``."""
        start, end = match.span(group)
        if start < 0:
            return ""
        return self.segment(start, end).strip()


# Builder: (match, utterance, focus) -> Intent, or None to let later rules try
IntentBuilder = Callable[[re.Match[str], Utterance, FocusContext], "Intent | None"]


@dataclass(frozen=True)
class CommandRule:
    """One (predicate, intent-constructor) pair of a command table."""

    category: RuleCategory
    pattern: str
    build: IntentBuilder
    command: str = ""
    example: str = ""
    route: str | None = None
    compiled: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "compiled", re.compile(self.pattern, re.IGNORECASE))

    def apply(self, utterance: Utterance, focus: FocusContext) -> Intent | None:
        match = self.compiled.search(utterance.lower)
        if match is None:
            return None
        return self.build(match, utterance, focus)


@dataclass(frozen=True)
class CommandTable:
    """Ordered rules for one page plus the fields that accept dictation."""

    page: PageName
    rules: tuple[CommandRule, ...]
    fields: frozenset[FocusContext] = frozenset()

    def __post_init__(self) -> None:
        # sorted() is stable: table order is kept inside each category
        object.__setattr__(
            self, "rules", tuple(sorted(self.rules, key=lambda rule: rule.category))
        )

    def commands(self) -> list[dict[str, Any]]:
        """Documented commands, in evaluation order."""
        return [
            {
                "command": rule.command,
                "example": rule.example,
                "category": rule.category.name.lower(),
            }
            for rule in self.rules
            if rule.command
        ]


def interpret(transcript: str, focus: FocusContext, table: CommandTable) -> Intent:
    """Interpret one final transcript against a page's command table.

    Returns:
        The first matching rule's Intent, else a dictation Intent for the
        focused field, else Intent NONE.
    """
    utterance = Utterance.of(transcript)
    if not utterance.text:
        return Intent.none().with_transcript(transcript)

    for rule in table.rules:
        intent = rule.apply(utterance, focus)
        if intent is not None:
            return intent.with_transcript(transcript)

    return dictate(utterance, focus, table).with_transcript(transcript)


def dictate(utterance: Utterance, focus: FocusContext, table: CommandTable) -> Intent:
    """Dictation fallback into the focused field.

    Email-address fields get spoken punctuation mapped and whitespace
    stripped, single-line fields are replaced, multi-line fields get the
    utterance appended.
    """
    if not utterance.text or focus not in table.fields:
        return Intent.none()

    kind = focus.kind
    if kind == FieldKind.EMAIL_ADDRESS:
        return Intent.set_field(focus, spoken_to_email(utterance.text))
    if kind == FieldKind.MULTI_LINE:
        return Intent.append_field(focus, utterance.text)
    return Intent.set_field(focus, utterance.text)


def append_text(existing: str, text: str) -> str:
    """Append dictated text to a multi-line value with a space separator."""
    if not existing:
        return text
    if existing[-1].isspace():
        return existing + text
    return f"{existing} {text}"
