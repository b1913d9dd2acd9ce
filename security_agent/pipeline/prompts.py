"""Prompt construction for security analysis sessions."""

from pathlib import PurePosixPath
from typing import List

from ..models import AnalysisUnit, SecurityRulesConfig


LANGUAGE_BY_EXTENSION = {
    ".cs": "csharp",
    ".js": "javascript",
    ".ts": "typescript",
    ".jsx": "jsx",
    ".tsx": "tsx",
    ".py": "python",
    ".java": "java",
    ".go": "go",
    ".rs": "rust",
    ".rb": "ruby",
    ".php": "php",
    ".swift": "swift",
    ".kt": "kotlin",
    ".kts": "kotlin",
    ".scala": "scala",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".hpp": "cpp",
    ".sql": "sql",
    ".html": "html",
    ".htm": "html",
    ".css": "css",
    ".scss": "scss",
    ".json": "json",
    ".xml": "xml",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".sh": "bash",
    ".bash": "bash",
    ".ps1": "powershell",
    ".md": "markdown",
}

BATCH_OUTPUT_INSTRUCTIONS = """Several files are included above. Every finding MUST include a "filePath" field
set to the exact path shown in the "File:" header of the file it belongs to."""


def get_language(file_path: str) -> str:
    """Best-effort code fence language tag from the file extension."""
    suffix = PurePosixPath(file_path.replace("\\", "/")).suffix.lower()
    return LANGUAGE_BY_EXTENSION.get(suffix, "text")


def _header(config: SecurityRulesConfig) -> List[str]:
    lines = [config.system_prompt]
    if config.include_rules_in_prompt:
        rules = config.enabled_rules
        if rules:
            lines.append("Focus on:")
            lines.extend(f"- {rule.description or rule.category}" for rule in rules)
    lines.append("")
    return lines


def _code_block(file_path: str, content: str) -> List[str]:
    return [
        f"File: {file_path}",
        f"```{get_language(file_path)}",
        content,
        "```",
        "",
    ]


def build_file_prompt(file_path: str, content: str, config: SecurityRulesConfig) -> str:
    """Prompt for analyzing a single file."""
    lines = _header(config)
    lines.extend(_code_block(file_path, content))
    lines.append(config.output_format)
    return "\n".join(lines)


def build_batch_prompt(unit: AnalysisUnit, config: SecurityRulesConfig) -> str:
    """Prompt for analyzing several files in one session."""
    lines = _header(config)
    for path, content in unit.files:
        lines.extend(_code_block(path, content))
    lines.append(config.output_format)
    lines.append("")
    lines.append(BATCH_OUTPUT_INSTRUCTIONS)
    return "\n".join(lines)


def build_prompt(unit: AnalysisUnit, config: SecurityRulesConfig) -> str:
    """Pick the single-file or batch prompt for a unit."""
    if unit.is_single_file:
        path, content = unit.files[0]
        return build_file_prompt(path, content, config)
    return build_batch_prompt(unit, config)
