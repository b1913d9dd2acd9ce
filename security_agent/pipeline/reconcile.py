"""Match AI-reported file paths back to submitted paths."""

from typing import Iterable, Optional


def normalize_path(path: str) -> str:
    """Use forward slashes and lowercase for comparison."""
    return path.replace("\\", "/").lower()


def match_file_path(claimed: Optional[str], valid_paths: Iterable[str]) -> Optional[str]:
    """
    Resolve a claimed path to one of the submitted paths.

    Resolution order, first match wins:
    1. Exact membership
    2. Case-insensitive equality after separator normalization
    3. A valid path ending with the normalized claimed path

    Args:
        claimed: Path reported by the backend for a finding
        valid_paths: Submitted paths, in submission order

    Returns:
        The matching submitted path, or None
    """
    if not claimed:
        return None

    candidates = list(valid_paths)
    if claimed in candidates:
        return claimed

    normalized = normalize_path(claimed.strip())
    if not normalized:
        return None

    for path in candidates:
        if normalize_path(path) == normalized:
            return path

    for path in candidates:
        if normalize_path(path).endswith(normalized):
            return path

    return None
