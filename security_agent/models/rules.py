"""Data models for security rule configuration."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class SecurityRule:
    """A rule category the analyzer looks for."""
    category: str
    description: str = ""
    enabled: bool = True


@dataclass(frozen=True)
class SecurityRulesConfig:
    """Read-only rule configuration, loaded once at startup."""
    model: Optional[str] = None  # None uses the backend default model
    system_prompt: str = ""
    include_rules_in_prompt: bool = True
    rules: Tuple[SecurityRule, ...] = field(default_factory=tuple)
    output_format: str = ""

    def __post_init__(self):
        object.__setattr__(self, "rules", tuple(self.rules))

    @property
    def enabled_rules(self) -> List[SecurityRule]:
        return [rule for rule in self.rules if rule.enabled]

    @property
    def enabled_categories(self) -> frozenset:
        return frozenset(rule.category for rule in self.rules if rule.enabled)
