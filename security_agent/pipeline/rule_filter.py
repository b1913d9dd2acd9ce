"""Keep only findings that belong to an enabled rule category.

Matching is keyword/substring based rather than an exact taxonomy lookup,
since the backend's category vocabulary is not fixed.
"""

from typing import Iterable, List

from ..models import SecurityFinding
from ..utils import get_logger


logger = get_logger(__name__)

MIN_KEYWORD_LENGTH = 4  # Category words of 3 chars or fewer are ignored


def normalize_text(text: str) -> str:
    """Lowercase, '&' -> 'and', '-'/'_' -> space."""
    return (text or "").lower().replace("&", "and").replace("-", " ").replace("_", " ")


def matches_category(finding: SecurityFinding, category: str) -> bool:
    """Whether a finding plausibly belongs to a category."""
    normalized_category = normalize_text(category).strip()
    if not normalized_category:
        return False

    title = normalize_text(finding.title)
    fields = (title, normalize_text(finding.description), normalize_text(finding.id))

    for word in normalized_category.split():
        if len(word) >= MIN_KEYWORD_LENGTH and any(word in field for field in fields):
            return True

    stripped_title = title.strip()
    if normalized_category in title:
        return True
    if stripped_title and stripped_title in normalized_category:
        return True

    return False


class RuleFilter:
    """
    Filters findings against a set of enabled categories.

    A disabled filter, or one with no enabled categories, keeps everything.
    """

    def __init__(self, enabled_categories: Iterable[str], enabled: bool = True):
        self.categories = frozenset(enabled_categories)
        self.enabled = enabled

    @property
    def active(self) -> bool:
        return self.enabled and bool(self.categories)

    def keep(self, finding: SecurityFinding) -> bool:
        if not self.active:
            return True
        return any(matches_category(finding, category) for category in self.categories)

    def apply(self, findings: Iterable[SecurityFinding]) -> List[SecurityFinding]:
        findings = list(findings)
        kept = [f for f in findings if self.keep(f)]
        if len(kept) < len(findings):
            logger.info(f"Filtered out {len(findings) - len(kept)} findings outside enabled rules")
        return kept
