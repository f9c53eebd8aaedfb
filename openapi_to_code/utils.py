"""
Naming helpers shared by the analyzer and the Kotlin backend.
"""

import re

# Regex pattern to split text into words, handling camelCase and acronym boundaries
_WORD_PATTERN = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|[0-9]+")

_NON_IDENTIFIER = re.compile(r"[^0-9a-zA-Z_]")

KOTLIN_KEYWORDS = {
    "as",
    "break",
    "class",
    "continue",
    "do",
    "else",
    "false",
    "for",
    "fun",
    "if",
    "in",
    "interface",
    "is",
    "null",
    "object",
    "package",
    "return",
    "super",
    "this",
    "throw",
    "true",
    "try",
    "typealias",
    "typeof",
    "val",
    "var",
    "when",
    "while",
}


def _normalize_separators(text: str) -> str:
    """Normalize separators (underscores, hyphens, dots, slashes) to spaces."""
    for sep in ("_", "-", ".", "/", "$", "@"):
        text = text.replace(sep, " ")
    return text


def _split_into_words(text: str) -> list[str]:
    """Split text into words, handling camelCase boundaries."""
    return _WORD_PATTERN.findall(text)


def _capitalize_and_join(words: list[str]) -> str:
    """Capitalize each word and join them together."""
    return "".join(word.capitalize() for word in words if word)


def snake_to_pascal_case(text: str) -> str:
    """Convert snake_case, kebab-case, camelCase, or space-separated text to PascalCase.

    Examples:
        "first_name" -> "FirstName"
        "not-null-required" -> "NotNullRequired"
        "actionTemplate" -> "ActionTemplate"
        "first 3 rows" -> "First3Rows"
        "ABC" -> "Abc"

    Args:
        text: The text to convert

    Returns:
        PascalCase string
    """
    if not text:
        return ""
    normalized = _normalize_separators(text)
    words = _split_into_words(normalized)
    return _capitalize_and_join(words)


def to_camel_case(text: str) -> str:
    """Convert a property key to a lowerCamelCase Kotlin identifier.

    Examples:
        "not-null-no-default" -> "notNullNoDefault"
        "created_at" -> "createdAt"
        "class" -> "`class`"
    """
    pascal = snake_to_pascal_case(text)
    if not pascal:
        return "_"
    name = pascal[0].lower() + pascal[1:]
    if name[0].isdigit():
        name = f"_{name}"
    if name in KOTLIN_KEYWORDS:
        return f"`{name}`"
    return name


def to_enum_member_name(value: object) -> str:
    """Convert an enum value to an UPPER_SNAKE member name.

    Examples:
        "active" -> "ACTIVE"
        "in-progress" -> "IN_PROGRESS"
        "sortDesc" -> "SORT_DESC"
        42 -> "_42"
        "" -> "EMPTY"
    """
    text = str(value)
    words = _split_into_words(_normalize_separators(text))
    if not words:
        return "EMPTY" if not text else _NON_IDENTIFIER.sub("_", text).upper()
    name = "_".join(word.upper() for word in words)
    if name[0].isdigit():
        name = f"_{name}"
    return name
