"""Read-path content policy.

A deliberately simple classifier: a message is blocked when it contains any
denylisted term as an exact, case-sensitive substring. There is no case
folding or Unicode normalization, so ``"Shit"`` passes a ``"shit"`` filter.
"""

from collections.abc import Iterable


class ContentPolicyFilter:
    def __init__(self, denylist: Iterable[str]):
        # Empty terms would match every message.
        self._terms = frozenset(term for term in denylist if term)

    @property
    def terms(self) -> frozenset[str]:
        return self._terms

    def is_blocked(self, text: str) -> bool:
        return any(term in text for term in self._terms)
