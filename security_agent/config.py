"""Configuration for the Security Review Agent."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union, Any
import json
import os

from .models import SecurityRule, SecurityRulesConfig


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() == "true"


@dataclass
class AnalyzerConfig:
    """Configuration for the analyzer service."""

    # Server
    host: str = "127.0.0.1"
    port: int = 5001

    # Batching
    enable_batching: bool = True
    batch_size: int = 5              # Max files per analysis unit
    max_batch_tokens: int = 60000    # Estimated token budget per unit

    # Filtering
    enable_rule_filter: bool = True  # Drop findings outside enabled categories

    # Rules file (JSON). None uses the built-in defaults
    rules_path: Optional[str] = None

    # Backend
    max_turns: int = 1

    @classmethod
    def from_env(cls) -> "AnalyzerConfig":
        """Create config from environment variables."""
        return cls(
            host=os.environ.get("AGENT_HOST", "127.0.0.1"),
            port=int(os.environ.get("AGENT_PORT", "5001")),
            enable_batching=_env_bool("ENABLE_BATCHING", "true"),
            batch_size=int(os.environ.get("BATCH_SIZE", "5")),
            max_batch_tokens=int(os.environ.get("MAX_BATCH_TOKENS", "60000")),
            enable_rule_filter=_env_bool("ENABLE_RULE_FILTER", "true"),
            rules_path=os.environ.get("SECURITY_RULES_PATH") or None,
            max_turns=int(os.environ.get("AGENT_MAX_TURNS", "1")),
        )


@dataclass
class ServiceEndpoints:
    """URLs of the services the gateway talks to."""
    security_agent_url: str = "http://localhost:5001"
    file_service_url: str = "http://localhost:5002"


@dataclass
class GatewayConfig:
    """Configuration for the gateway service."""

    host: str = "127.0.0.1"
    port: int = 5000
    endpoints: ServiceEndpoints = field(default_factory=ServiceEndpoints)
    request_timeout: float = 300.0  # Analysis runs can take minutes

    @classmethod
    def from_env(cls) -> "GatewayConfig":
        """Create config from environment variables."""
        return cls(
            host=os.environ.get("GATEWAY_HOST", "127.0.0.1"),
            port=int(os.environ.get("GATEWAY_PORT", "5000")),
            endpoints=ServiceEndpoints(
                security_agent_url=os.environ.get("SECURITY_AGENT_URL", "http://localhost:5001").rstrip("/"),
                file_service_url=os.environ.get("FILE_SERVICE_URL", "http://localhost:5002").rstrip("/"),
            ),
            request_timeout=float(os.environ.get("REQUEST_TIMEOUT", "300")),
        )


DEFAULT_SYSTEM_PROMPT = (
    "You are a security analysis expert. "
    "Analyze the following code for security vulnerabilities."
)

DEFAULT_OUTPUT_FORMAT = """Respond with ONLY a JSON array of findings in this exact format (no markdown, no explanation):
[
  {
    "ruleId": "SQL-001",
    "title": "Potential SQL Injection",
    "description": "Detailed description",
    "severity": "High",
    "lineNumber": 5,
    "codeSnippet": "var query = ...",
    "remediation": "Use parameterized queries"
  }
]

If no issues found, return an empty array: []"""

DEFAULT_RULES = (
    SecurityRule("SQL Injection", "SQL Injection vulnerabilities"),
    SecurityRule("Hardcoded Secrets", "Hardcoded secrets or credentials"),
    SecurityRule("Authentication & Authorization", "Authentication and authorization issues"),
    SecurityRule("Input Validation", "Input validation problems"),
    SecurityRule("Insecure Cryptography", "Insecure cryptography"),
    SecurityRule("CORS Misconfiguration", "CORS misconfigurations"),
    SecurityRule("Sensitive Data Exposure", "Exposure of sensitive data"),
)

DEFAULT_RULES_CONFIG = SecurityRulesConfig(
    system_prompt=DEFAULT_SYSTEM_PROMPT,
    include_rules_in_prompt=True,
    rules=DEFAULT_RULES,
    output_format=DEFAULT_OUTPUT_FORMAT,
)


def _pick(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return default


def rules_config_from_dict(data: dict[str, Any]) -> SecurityRulesConfig:
    """
    Build a rules config from a parsed JSON document.

    Accepts camelCase or snake_case keys. Fields that are absent keep
    the built-in defaults.

    Raises:
        ValueError: If the document has the wrong shape
    """
    if not isinstance(data, dict):
        raise ValueError("Rules config must be a JSON object")

    raw_rules = _pick(data, "rules", default=None)
    if raw_rules is None:
        rules = DEFAULT_RULES
    else:
        if not isinstance(raw_rules, list):
            raise ValueError("'rules' must be a list")
        rules = []
        for item in raw_rules:
            if not isinstance(item, dict) or not item.get("category"):
                raise ValueError(f"Invalid rule entry: {item!r}")
            rules.append(SecurityRule(
                category=str(item["category"]),
                description=str(item.get("description", "")),
                enabled=bool(item.get("enabled", True)),
            ))

    return SecurityRulesConfig(
        model=_pick(data, "model", default=None) or None,
        system_prompt=_pick(data, "systemPrompt", "system_prompt", default=DEFAULT_SYSTEM_PROMPT),
        include_rules_in_prompt=bool(
            _pick(data, "includeRulesInPrompt", "include_rules_in_prompt", default=True)
        ),
        rules=tuple(rules),
        output_format=_pick(data, "outputFormat", "output_format", default=DEFAULT_OUTPUT_FORMAT),
    )


def rules_config_to_dict(config: SecurityRulesConfig) -> dict[str, Any]:
    """Serialize a rules config to its JSON document form."""
    return {
        "model": config.model,
        "systemPrompt": config.system_prompt,
        "includeRulesInPrompt": config.include_rules_in_prompt,
        "rules": [
            {"category": r.category, "description": r.description, "enabled": r.enabled}
            for r in config.rules
        ],
        "outputFormat": config.output_format,
    }


def load_rules_config(path: Optional[Union[str, Path]] = None) -> SecurityRulesConfig:
    """
    Load the rules config from a JSON file.

    Args:
        path: Rules file. None or a missing file gives DEFAULT_RULES_CONFIG.

    Raises:
        ValueError: If the file exists but cannot be parsed
    """
    if path is None:
        return DEFAULT_RULES_CONFIG

    rules_file = Path(path)
    if not rules_file.exists():
        return DEFAULT_RULES_CONFIG

    try:
        data = json.loads(rules_file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ValueError(f"Failed to read rules config {rules_file}: {e}") from e

    return rules_config_from_dict(data)


# Default configurations
DEFAULT_ANALYZER_CONFIG = AnalyzerConfig()
DEFAULT_GATEWAY_CONFIG = GatewayConfig()
