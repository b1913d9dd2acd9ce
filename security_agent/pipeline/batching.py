"""Batching: split files into analysis units under count and token limits."""

from typing import Dict, List, Sequence, Tuple

from ..models import AnalysisUnit
from ..utils import get_logger


logger = get_logger(__name__)

# Fixed per-file prompt overhead (headers, code fence)
FILE_OVERHEAD_TOKENS = 50


def estimate_tokens(path: str, content: str) -> int:
    """Cheap token estimate for one file in a prompt (~4 chars per token)."""
    return len(content) // 4 + FILE_OVERHEAD_TOKENS + len(path) // 4


def plan_units(
    paths: Sequence[str],
    contents: Dict[str, str],
    max_count: int,
    max_tokens: int,
) -> List[AnalysisUnit]:
    """
    Greedily group files into analysis units, preserving order.

    A file whose own estimate exceeds max_tokens still gets a unit of its own.
    Paths without content are skipped.

    Args:
        paths: File paths in submission order
        contents: Mapping of path to file content
        max_count: Maximum files per unit
        max_tokens: Maximum estimated tokens per unit

    Returns:
        Non-empty units in submission order
    """
    max_count = max(1, max_count)

    units: List[AnalysisUnit] = []
    current: List[Tuple[str, str]] = []
    current_tokens = 0

    for path in paths:
        content = contents.get(path)
        if content is None:
            logger.warning(f"File content not found for {path}")
            continue

        cost = estimate_tokens(path, content)

        if current and (
            len(current) + 1 > max_count or current_tokens + cost > max_tokens
        ):
            units.append(AnalysisUnit(files=tuple(current), estimated_tokens=current_tokens))
            current = []
            current_tokens = 0

        if cost > max_tokens:
            logger.warning(
                f"{path} is estimated at {cost} tokens, over the {max_tokens} budget; "
                "analyzing it alone"
            )

        current.append((path, content))
        current_tokens += cost

    if current:
        units.append(AnalysisUnit(files=tuple(current), estimated_tokens=current_tokens))

    logger.debug(f"Planned {len(units)} units for {len(paths)} paths")
    return units


def single_file_units(paths: Sequence[str], contents: Dict[str, str]) -> List[AnalysisUnit]:
    """One unit per file, used when batching is disabled."""
    units = []
    for path in paths:
        content = contents.get(path)
        if content is None:
            logger.warning(f"File content not found for {path}")
            continue
        units.append(AnalysisUnit(files=((path, content),), estimated_tokens=estimate_tokens(path, content)))
    return units
