"""
Naming conventions for convention-based attachment.

``ArticlesController`` guards ``article`` with ``ArticleSentinel``. These
helpers derive those names.
"""

from __future__ import annotations

import re

CONTROLLER_SUFFIX = "Controller"
SENTINEL_SUFFIX = "Sentinel"

_UNCOUNTABLE = frozenset({
    "equipment", "information", "rice", "money", "species", "series",
    "fish", "sheep", "jeans", "news", "police",
})

_IRREGULAR = {
    "people": "person",
    "men": "man",
    "women": "woman",
    "children": "child",
    "sexes": "sex",
    "moves": "move",
    "zombies": "zombie",
    "geese": "goose",
    "feet": "foot",
    "teeth": "tooth",
}

# First match wins, so more specific patterns come first
_SINGULAR_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"(database)s$"), r"\1"),
    (re.compile(r"(quiz)zes$"), r"\1"),
    (re.compile(r"(matr)ices$"), r"\1ix"),
    (re.compile(r"(vert|ind)ices$"), r"\1ex"),
    (re.compile(r"^(ox)en"), r"\1"),
    (re.compile(r"(alias|status)(es)?$"), r"\1"),
    (re.compile(r"(octop|vir)(us|i|uses)$"), r"\1us"),
    (re.compile(r"^(a)x[ie]s$"), r"\1xis"),
    (re.compile(r"(cris|test)(is|es)$"), r"\1is"),
    (re.compile(r"(shoe)s$"), r"\1"),
    (re.compile(r"(o)es$"), r"\1"),
    (re.compile(r"(bus)(es)?$"), r"\1"),
    (re.compile(r"^(m|l)ice$"), r"\1ouse"),
    (re.compile(r"(x|ch|ss|sh)es$"), r"\1"),
    (re.compile(r"(m)ovies$"), r"\1ovie"),
    (re.compile(r"([^aeiouy]|qu)ies$"), r"\1y"),
    (re.compile(r"([lr])ves$"), r"\1f"),
    (re.compile(r"(tive)s$"), r"\1"),
    (re.compile(r"(hive)s$"), r"\1"),
    (re.compile(r"([^f])ves$"), r"\1fe"),
    (re.compile(r"(^analy)(sis|ses)$"), r"\1sis"),
    (re.compile(r"(analy|ba|diagno|parenthe|progno|synop|the)(sis|ses)$"), r"\1sis"),
    (re.compile(r"([ti])a$"), r"\1um"),
    (re.compile(r"(ss)$"), r"\1"),
    (re.compile(r"s$"), ""),
]


def demodulize(name: str) -> str:
    """
    Strip any module or namespace prefix from a class name.

    Example:
        >>> demodulize("admin.ArticlesController")
        'ArticlesController'
        >>> demodulize("Admin::ArticlesController")
        'ArticlesController'
    """
    return re.split(r"\.|::", name)[-1]


def underscore(name: str) -> str:
    """
    Convert CamelCase to snake_case.

    Example:
        >>> underscore("BlogPosts")
        'blog_posts'
    """
    snake_case = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    snake_case = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", snake_case)
    return snake_case.lower()


def camelize(name: str) -> str:
    """
    Convert snake_case to CamelCase.

    Example:
        >>> camelize("blog_post")
        'BlogPost'
    """
    return "".join(part.capitalize() for part in name.split("_") if part)


def singularize(word: str) -> str:
    """
    Return the singular form of a lowercase English word.

    Only the last underscore-separated part is singularized.

    Example:
        >>> singularize("categories")
        'category'
        >>> singularize("blog_posts")
        'blog_post'
    """
    head, sep, last = word.rpartition("_")
    if last in _UNCOUNTABLE or not last:
        return word
    if last in _IRREGULAR:
        return f"{head}{sep}{_IRREGULAR[last]}"
    for pattern, replacement in _SINGULAR_RULES:
        if pattern.search(last):
            return f"{head}{sep}{pattern.sub(replacement, last)}"
    return word


def derive_names(controller_name: str) -> tuple[str, str]:
    """
    Derive the subject attribute name and sentinel type name for a controller.

    Args:
        controller_name: Controller class name, optionally module-qualified.

    Returns:
        Tuple of (attribute_name, sentinel_type_name).

    Example:
        >>> derive_names("ArticlesController")
        ('article', 'ArticleSentinel')
        >>> derive_names("admin.BlogPostsController")
        ('blog_post', 'BlogPostSentinel')
    """
    name = demodulize(controller_name)
    if name.endswith(CONTROLLER_SUFFIX):
        name = name[: -len(CONTROLLER_SUFFIX)]

    attribute_name = singularize(underscore(name))
    return attribute_name, f"{camelize(attribute_name)}{SENTINEL_SUFFIX}"
