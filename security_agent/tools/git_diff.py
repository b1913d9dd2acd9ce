"""Collect changed files from a local git repository."""

import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence


DEFAULT_EXTENSIONS = (
    "cs", "rs", "py", "js", "ts", "jsx", "tsx", "java", "go", "rb", "php", "c", "cpp", "h", "hpp",
)

_SAFE_REF = re.compile(r"^[a-zA-Z0-9_./@^~-]+$")


@dataclass
class GitDiffResult:
    """Changed files from a git diff."""
    changed_files: List[Path] = field(default_factory=list)
    repository_root: Path = Path(".")
    description: str = ""


def _run_git(args: List[str], cwd: Optional[Path] = None) -> subprocess.CompletedProcess:
    return subprocess.run(["git", *args], cwd=cwd, capture_output=True, text=True)


def is_git_repository(cwd: Optional[Path] = None) -> bool:
    result = _run_git(["rev-parse", "--is-inside-work-tree"], cwd)
    return result.returncode == 0


def get_repository_root(cwd: Optional[Path] = None) -> Path:
    result = _run_git(["rev-parse", "--show-toplevel"], cwd)
    if result.returncode != 0:
        raise ValueError("Not a git repository")
    return Path(result.stdout.strip())


def validate_git_ref(reference: str) -> None:
    """
    Reject refs that could be read as flags or contain unsafe characters.

    Raises:
        ValueError: If the reference is not acceptable
    """
    if reference.startswith("-"):
        raise ValueError("Invalid git reference: cannot start with '-'")
    if not _SAFE_REF.match(reference):
        raise ValueError("Invalid git reference: contains invalid characters")


def _within_repo(path: Path, repo_root: Path) -> bool:
    # Deleted files don't exist; they're filtered out later
    if not path.exists():
        return True
    try:
        return path.resolve().is_relative_to(repo_root.resolve())
    except OSError:
        return False


def get_changed_files(
    staged: bool = False,
    commit: Optional[str] = None,
    cwd: Optional[Path] = None,
) -> GitDiffResult:
    """
    List files changed in the working tree, the index, or since a commit.

    Raises:
        ValueError: If git fails or the commit reference is invalid
    """
    repo_root = get_repository_root(cwd)

    if staged:
        args, description = ["diff", "--staged", "--name-only"], "staged changes"
    elif commit:
        validate_git_ref(commit)
        args, description = ["diff", "--name-only", commit, "HEAD"], f"changes since {commit}"
    else:
        args, description = ["diff", "--name-only"], "unstaged changes"

    result = _run_git(args, repo_root)
    if result.returncode != 0:
        raise ValueError("Git diff failed. Verify the reference exists.")

    files = [
        repo_root / line.strip()
        for line in result.stdout.splitlines()
        if line.strip()
    ]
    files = [f for f in files if _within_repo(f, repo_root)]

    return GitDiffResult(changed_files=files, repository_root=repo_root, description=description)


def filter_analyzable_files(
    files: Sequence[Path],
    extensions: Optional[Sequence[str]] = None,
) -> List[Path]:
    """Keep existing files with an analyzable extension (case-insensitive)."""
    allowed = {e.lower().lstrip(".") for e in (extensions or DEFAULT_EXTENSIONS)}
    return [
        f for f in files
        if f.suffix.lower().lstrip(".") in allowed and f.exists()
    ]
