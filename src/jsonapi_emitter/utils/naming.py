import re
import typing

_irregular_plurals: typing.Dict[str, str] = {
    "child": "children",
    "foot": "feet",
    "goose": "geese",
    "man": "men",
    "mouse": "mice",
    "person": "people",
    "tooth": "teeth",
    "woman": "women",
}

_uncountables = frozenset(
    ["equipment", "fish", "information", "metadata", "news", "series", "sheep", "species"]
)


def dasherize(name: str) -> str:
    """
    Converts a camel-cased or underscored name to its lower-cased, dash separated form.

    >>> dasherize("BlogPost")
    'blog-post'
    """
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1-\2", name)
    name = re.sub(r"([a-z\d])([A-Z])", r"\1-\2", name)
    return name.replace("_", "-").lower()


def pluralize(word: str) -> str:
    """
    Returns the plural form of the last dash separated component of ``word``.

    >>> pluralize("person")
    'people'
    >>> pluralize("blog-post")
    'blog-posts'
    """
    head, sep, last = word.rpartition("-")
    lower = last.lower()
    if lower in _uncountables or not lower:
        plural = last
    elif lower in _irregular_plurals:
        plural = _irregular_plurals[lower]
    elif re.search(r"[^aeiou]y$", lower):
        plural = last[:-1] + "ies"
    elif re.search(r"(s|x|z|ch|sh)$", lower):
        plural = last + "es"
    else:
        plural = last + "s"
    return head + sep + plural


def english_enumerate(
    items: typing.Iterable[str], conj: str = ", and ", quote: str = ""
) -> str:
    """
    Enumerates ``items`` the way an English sentence would.

    >>> english_enumerate(["a", "b", "c"])
    'a, b, and c'
    >>> english_enumerate(["a", "b"], conj=" or ", quote='"')
    '"a" or "b"'
    >>> english_enumerate(["a"])
    'a'
    """
    quoted = [f"{quote}{item}{quote}" for item in items]
    if len(quoted) < 2:
        return "".join(quoted)
    return ", ".join(quoted[:-1]) + conj + quoted[-1]
