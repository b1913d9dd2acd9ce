"""Initialize a security rules file for customization."""

import json
from pathlib import Path
from typing import Optional

from ..config import DEFAULT_RULES_CONFIG, rules_config_to_dict


RULES_FILENAME = "security-rules.json"


def init_rules_file(target_dir: Optional[Path] = None) -> bool:
    """
    Write the default rules config to a directory.

    Creates:
      - security-rules.json

    Point SECURITY_RULES_PATH at the file to use it.
    """
    target = target_dir or Path.cwd()

    if not target.is_dir():
        print(f"Error: {target} is not a directory")
        return False

    rules_file = target / RULES_FILENAME
    if rules_file.exists():
        print(f"Already exists: {rules_file}")
        print("\nAlready configured. No changes needed.")
        return True

    rules_file.write_text(json.dumps(rules_config_to_dict(DEFAULT_RULES_CONFIG), indent=2) + "\n")
    print(f"Created: {rules_file}")

    print("\nNext steps:")
    print("  1. Edit the rules (set \"enabled\": false to skip a category)")
    print(f"  2. export SECURITY_RULES_PATH={rules_file}")
    print("  3. security-agent serve-agent")

    return True


if __name__ == "__main__":
    init_rules_file()
