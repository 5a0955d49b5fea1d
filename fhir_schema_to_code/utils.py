"""
Utility functions for FHIR schema to code generator.
"""

import keyword
import re

# Regex pattern to split text into words, handling camelCase boundaries and acronyms
_WORD_PATTERN = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|[0-9]+")


def _normalize_separators(text: str) -> str:
    """Normalize separators (underscores, hyphens, dots) to spaces."""
    return text.replace("_", " ").replace("-", " ").replace(".", " ")


def _split_into_words(text: str) -> list[str]:
    """Split text into words, handling camelCase boundaries."""
    return _WORD_PATTERN.findall(_normalize_separators(text))


def _capitalize_and_join(words: list[str]) -> str:
    """Capitalize each word and join them together."""
    return "".join(word.capitalize() for word in words if word)


def snake_to_pascal_case(text: str) -> str:
    """Convert snake_case, camelCase, or space-separated text to PascalCase.

    Examples:
        "first_name" -> "FirstName"
        "dateTime" -> "DateTime"
        "base64Binary" -> "Base64Binary"
        "CodeableConcept" -> "CodeableConcept"

    Args:
        text: The text to convert

    Returns:
        PascalCase string
    """
    if not text:
        return ""
    return _capitalize_and_join(_split_into_words(text))


def pascal_to_snake_case(text: str) -> str:
    """Convert PascalCase or camelCase text to snake_case.

    Digit runs and acronyms become words of their own.

    Examples:
        "CodeableConcept" -> "codeable_concept"
        "base64Binary" -> "base_64_binary"
        "dateTime" -> "date_time"
        "integer64" -> "integer_64"
        "UUIDValue" -> "uuid_value"

    Args:
        text: The text to convert

    Returns:
        snake_case string
    """
    return "_".join(word.lower() for word in _split_into_words(text))


def python_safe_identifier(name: str) -> str:
    """Make a snake_case name usable as a Python identifier.

    Keywords get a trailing underscore ("class" -> "class_") and names
    starting with a digit get a leading one.
    """
    if not name:
        return "_"
    if name[0].isdigit():
        name = f"_{name}"
    if keyword.iskeyword(name):
        name = f"{name}_"
    return name
