"""Escaping of storage key components and key patterns."""

import string
from typing import Any, Final
from urllib.parse import quote

from kv_record_adapter.type_checking.bear_spray import bear_enforce

# Printable ASCII without whitespace, the escape character and the key separator
SAFE_KEY_CHARACTERS: Final[str] = "".join(
    character for character in string.printable if character not in string.whitespace and character not in "%:"
)

# A closing bracket outside a character class is already literal for both Redis and fnmatch
GLOB_ESCAPES: Final[dict[str, str]] = {"*": "[*]", "?": "[?]", "[": "[[]", "\\": "[\\\\]"}


def sanitize_key_component(value: Any) -> str:  # pyright: ignore[reportAny]
    """Render a key component as text that is safe for the key namespace.

    Whitespace, control characters, `%`, `:` and non-ASCII characters are percent-encoded. The escape is
    reversible, so two different values never produce the same component.
    """
    return quote(str(value), safe=SAFE_KEY_CHARACTERS)  # pyright: ignore[reportAny]


@bear_enforce
def escape_glob(value: str) -> str:
    """Escape a literal string for use inside a glob-style key pattern.

    Special characters are wrapped in a single-character class (`*` -> `[*]`), which both Redis and
    `fnmatch` read as the literal character.
    """
    return "".join(GLOB_ESCAPES.get(character, character) for character in value)
