"""CLI helpers."""

from .init_cmd import init_rules_file, RULES_FILENAME

__all__ = [
    "init_rules_file",
    "RULES_FILENAME",
]
