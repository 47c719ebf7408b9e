"""
Denylist-based word masking applied to record content before storage.

A filter is built from ``(pattern, mask)`` pairs. Patterns are literal words
matched case-insensitively; each occurrence is replaced with the pattern's
mask. Entries are checked when the filter is built so that filtering never
produces content longer than its input and filtering already-filtered text
changes nothing.
"""

import re
from typing import Iterable, List, Optional, Tuple

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

Denylist = Iterable[Tuple[str, str]]


def _folded(text: str) -> set:
    chars = set()
    for char in text:
        chars.update((char, char.lower(), char.upper()))
    return chars


class ContentFilter:
    """Replace denylisted words with fixed masks."""

    def __init__(self, denylist: Denylist = ()):
        self.entries: List[Tuple[str, str]] = []
        for pattern, mask in denylist:
            if not isinstance(pattern, str) or not pattern.strip():
                raise ImproperlyConfigured("Content filter patterns must be non-empty strings")
            if not isinstance(mask, str) or not mask.strip():
                raise ImproperlyConfigured(f"Mask for {pattern!r} must be a non-blank string")
            if len(mask) > len(pattern):
                raise ImproperlyConfigured(
                    f"Mask {mask!r} is longer than the pattern {pattern!r} it replaces"
                )
            self.entries.append((pattern, mask))

        pattern_chars = set()
        for pattern, _ in self.entries:
            pattern_chars |= _folded(pattern)
        for pattern, mask in self.entries:
            shared = _folded(mask) & pattern_chars
            if shared:
                raise ImproperlyConfigured(
                    f"Mask {mask!r} for {pattern!r} shares characters with the denylist: "
                    f"{''.join(sorted(shared))!r}"
                )

        self._regex: Optional[re.Pattern] = None
        if self.entries:
            # Longest pattern wins where two patterns overlap.
            ordered = sorted(enumerate(self.entries), key=lambda item: -len(item[1][0]))
            self._regex = re.compile(
                "|".join(f"(?P<p{index}>{re.escape(pattern)})" for index, (pattern, _) in ordered),
                re.IGNORECASE,
            )

    @classmethod
    def from_settings(cls) -> "ContentFilter":
        return cls(getattr(settings, "REGISTRY_CONTENT_FILTER", ()))

    def _mask_for(self, match: re.Match) -> str:
        index = int(match.lastgroup[1:])
        return self.entries[index][1]

    def apply(self, text: str) -> str:
        if self._regex is None:
            return text
        return self._regex.sub(self._mask_for, text)

    __call__ = apply
