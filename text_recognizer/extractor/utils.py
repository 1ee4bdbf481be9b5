"""
Text cleanup for raw OCR output.

Tesseract output on noisy images is full of recognition garbage: control
bytes, stray symbols, runs of blank lines and spaces. These helpers reduce
a raw fragment to a fixed character set with normalized whitespace, and
join the cleaned fragments into the final answer.

All functions are pure string transforms.
"""

import string
from typing import Iterable, List

# Characters kept as-is. Newlines are handled separately.
ALLOWED_CHARACTERS = frozenset(
    string.ascii_letters + string.digits + ' ' + ',.!?'
)

SEPARATOR = ' '


def filter_characters(text: str) -> str:
    """
    Keep only whitelisted characters.

    A newline survives only as a lone interior line break: it is dropped at
    either end of the string and whenever a neighbour in the raw input is
    also a newline. Everything else outside the whitelist is dropped.
    """
    if not text:
        return ""

    last = len(text) - 1
    kept = []
    for idx, char in enumerate(text):
        if char in ALLOWED_CHARACTERS:
            kept.append(char)
        elif char == '\n':
            if 0 < idx < last and text[idx - 1] != '\n' and text[idx + 1] != '\n':
                kept.append(char)
    return ''.join(kept)


def collapse_spaces(text: str) -> str:
    """Collapse runs of spaces to one and strip leading/trailing spaces."""
    return SEPARATOR.join(part for part in text.split(' ') if part)


def sanitize_text(text: str) -> str:
    """
    Clean one raw OCR fragment.

    Example:
        >>> sanitize_text("  He!!o\\x01 World\\n\\n")
        'He!!o World'
    """
    return collapse_spaces(filter_characters(text))


def assemble_result(fragments: Iterable[str]) -> str:
    """
    Join cleaned fragments in order, each followed by one space.

    Empty fragments are dropped entirely. The trailing space is part of
    the result; no fragments gives the empty string.
    """
    return ''.join(fragment + SEPARATOR for fragment in fragments if fragment)


def normalize_result(fragments: Iterable[str]) -> str:
    """
    Assemble fragments keeping only the first occurrence of each word.

    Words are space-separated tokens; the result follows the same
    trailing-separator convention as assemble_result.
    """
    seen = set()
    words: List[str] = []
    for word in assemble_result(fragments).split(SEPARATOR):
        if word and word not in seen:
            seen.add(word)
            words.append(word)
    return assemble_result(words)
