"""
Word tokenizer for console input.

Lines are split on the single space character, so consecutive spaces
produce empty words; nothing is collapsed or trimmed besides the line
terminator.
"""

from typing import Iterable, List, Tuple

from rcon_common.exceptions import ValidationError

DELIMITER = " "


def strip_terminator(line: str) -> str:
    """Drop one "\n", then at most one "\r"; other trailing bytes are content."""
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def split_line(line: str) -> List[str]:
    """Split one input line into words, keeping empty words."""
    return strip_terminator(line).split(DELIMITER)


def validate_words(words: Iterable[str]) -> Tuple[str, ...]:
    """
    Check every word is ASCII.
    
    Args:
        words: Words in query order
        
    Returns:
        The words as an immutable query, order preserved
        
    Raises:
        ValidationError: On the first word containing a non-ASCII character
    """
    validated = []
    for position, word in enumerate(words):
        if not word.isascii():
            raise ValidationError(
                f"{word!r} is not an ASCII string",
                details={"position": position},
            )
        validated.append(word)
    return tuple(validated)


def tokenize(line: str) -> Tuple[str, ...]:
    """Split and validate one input line."""
    return validate_words(split_line(line))


def is_blank(line: str) -> bool:
    """True for a line with nothing but its terminator."""
    return strip_terminator(line) == ""
