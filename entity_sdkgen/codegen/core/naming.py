"""
Naming utilities for safe code generation.

Schema names are used verbatim in generated code wherever possible; the
sanitizer only steps in for characters the target language rejects and
for collisions with its keywords.
"""

import re
from typing import Callable, Dict, Optional, Set

from .errors import SchemaError


class NameSanitizer:
    """Handles identifier sanitization for one target language."""

    def __init__(
        self,
        reserved_words: Set[str] = None,
        builtin_types: Set[str] = None,
        escape: Optional[Callable[[str], str]] = None,
    ):
        """
        Initialize name sanitizer.

        Args:
            reserved_words: Set of language reserved words
            builtin_types: Set of builtin type names that might conflict
            escape: Turns a conflicting name into a legal one; appends an
                underscore when not given
        """
        self.reserved_words = reserved_words or set()
        self.builtin_types = builtin_types or set()
        self._escape = escape or (lambda name: f"{name}_")
        self._name_cache: Dict[str, str] = {}
        # Sanitized name -> schema name, for the current declaration scope
        self._used_names: Dict[str, str] = {}

    def sanitize_name(self, name: str) -> str:
        """
        Sanitize a name for safe use in the target language.

        Args:
            name: Original name to sanitize

        Returns:
            Sanitized name safe for use
        """
        if name in self._name_cache:
            return self._name_cache[name]

        cleaned = self._clean_basic(name)
        if cleaned in self.reserved_words or cleaned in self.builtin_types:
            cleaned = self._escape(cleaned)

        self._name_cache[name] = cleaned
        return cleaned

    def claim_name(self, name: str) -> str:
        """
        Sanitize a name declared in the current scope.

        Raises:
            SchemaError: If a different name in the scope sanitizes to the
                same identifier
        """
        cleaned = self.sanitize_name(name)
        owner = self._used_names.setdefault(cleaned, name)
        if owner != name:
            raise SchemaError(
                f"Names '{owner}' and '{name}' both become '{cleaned}'"
            )
        return cleaned

    def is_reserved(self, name: str) -> bool:
        return name in self.reserved_words or name in self.builtin_types

    def _clean_basic(self, name: str) -> str:
        """Basic name cleanup - replace invalid characters."""
        cleaned = re.sub(r"[^a-zA-Z0-9_]", "_", name)

        # Ensure doesn't start with number
        if cleaned and cleaned[0].isdigit():
            cleaned = f"_{cleaned}"

        if not cleaned:
            cleaned = "field"

        return cleaned

    def reset_used_names(self):
        """Start a new declaration scope."""
        self._used_names.clear()

    @property
    def used_names(self) -> Set[str]:
        return set(self._used_names)
