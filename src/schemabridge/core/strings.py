"""
String utility functions for schemabridge.

Identifier tokenizing, casing and pluralization shared by the relation
matcher, back-relation synthesis and domain clustering.
"""

from __future__ import annotations

import re

# Suffixes marking a scalar column as a foreign key, longest first
KEY_SUFFIXES: tuple[str, ...] = ("_id", "_ID", "Id", "ID")

_TOKEN_SPLIT = re.compile(r"[^A-Za-z0-9]+|(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")

_IRREGULAR_PLURALS = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "mouse": "mice",
    "datum": "data",
    "medium": "media",
    "criterion": "criteria",
    "index": "indices",
    "matrix": "matrices",
    "vertex": "vertices",
    "status": "statuses",
    "address": "addresses",
}


def split_words(name: str) -> list[str]:
    """
    Split an identifier on case boundaries and separators, preserving case.

    Purely numeric fragments are dropped.

    Examples:
        >>> split_words("OrderLineItem")
        ['Order', 'Line', 'Item']
        >>> split_words("author_id")
        ['author', 'id']
        >>> split_words("HTTPRequest")
        ['HTTP', 'Request']
    """
    return [t for t in _TOKEN_SPLIT.split(name) if t and not t.isdigit()]


def tokenize(name: str) -> tuple[str, ...]:
    """Lowercase word tokens of an identifier (``"authorId"`` -> ``("author", "id")``)."""
    return tuple(t.lower() for t in split_words(name))


def capitalize(word: str) -> str:
    """Upper-case the first character only (``"blogPost"`` -> ``"BlogPost"``)."""
    return word[:1].upper() + word[1:]


def lower_first(word: str) -> str:
    """Lower-case the first character only (``"BlogPosts"`` -> ``"blogPosts"``)."""
    return word[:1].lower() + word[1:]


def strip_key_suffix(name: str) -> str | None:
    """
    Strip a foreign-key suffix from a field name.

    Returns:
        The remainder, or None if the name has no key suffix or is only a suffix.
    """
    for suffix in KEY_SUFFIXES:
        if name.endswith(suffix) and len(name) > len(suffix):
            return name[: -len(suffix)]
    return None


def pluralize(word: str) -> str:
    """
    Convert a singular English word to its plural form.

    CamelCase words pluralize their last word only.

    Examples:
        >>> pluralize("Post")
        'Posts'
        >>> pluralize("Category")
        'Categories'
        >>> pluralize("BlogEntry")
        'BlogEntries'
        >>> pluralize("person")
        'people'
    """
    if not word:
        return word

    lower_word = word.lower()

    if lower_word in _IRREGULAR_PLURALS:
        plural = _IRREGULAR_PLURALS[lower_word]
        if word[0].isupper():
            return plural.capitalize()
        return plural

    camel_match = re.match(r"^(.+?)([A-Z][a-z]+)$", word)
    if camel_match:
        prefix, last_word = camel_match.groups()
        return prefix + pluralize(last_word)

    if lower_word.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    if lower_word.endswith("y"):
        if len(word) > 1 and lower_word[-2] in "aeiou":
            return word + "s"
        return word[:-1] + "ies"
    if lower_word.endswith("fe"):
        return word[:-2] + "ves"
    if lower_word.endswith(("elf", "alf", "olf", "eaf", "oaf", "arf")):
        return word[:-1] + "ves"
    return word + "s"
