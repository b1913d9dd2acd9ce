"""GitHub API wrapper for analyzing pull request files."""

import os
from typing import Dict, List, Optional, Sequence

from github import Github, GithubException
from github.PullRequest import PullRequest

from ..models import SecurityFinding, Severity
from ..utils import get_logger
from .git_diff import DEFAULT_EXTENSIONS


class GitHubTool:
    """
    GitHub API wrapper for pull request analysis.

    Handles:
    - Listing changed files of a PR
    - Fetching their contents at the PR head
    - Posting a findings summary comment
    """

    def __init__(self, repo: str, pr_number: int, token: Optional[str] = None):
        """
        Initialize GitHub tool.

        Args:
            repo: Repository in format "owner/repo"
            pr_number: Pull request number
            token: GitHub token (defaults to GITHUB_TOKEN env var)
        """
        self.token = token or os.environ.get("GITHUB_TOKEN")
        if not self.token:
            raise ValueError("GitHub token required. Set GITHUB_TOKEN env var or pass token parameter.")

        self.gh = Github(self.token)
        self.repo = self.gh.get_repo(repo)
        self.pr_number = pr_number
        self._pr: Optional[PullRequest] = None
        self.logger = get_logger(__name__)

    @property
    def pr(self) -> PullRequest:
        """Get the pull request object (cached)."""
        if self._pr is None:
            self._pr = self.repo.get_pull(self.pr_number)
        return self._pr

    def get_changed_files(self, extensions: Optional[Sequence[str]] = None) -> List[str]:
        """Paths changed in this PR (removed files excluded), filtered by extension."""
        allowed = {e.lower().lstrip(".") for e in (extensions or DEFAULT_EXTENSIONS)}
        return [
            f.filename for f in self.pr.get_files()
            if f.status != "removed" and f.filename.rsplit(".", 1)[-1].lower() in allowed
        ]

    def get_file_contents(self, paths: Sequence[str]) -> Dict[str, str]:
        """
        Fetch file contents at the PR head commit.

        Files that cannot be fetched or decoded are skipped.
        """
        ref = self.pr.head.sha
        contents: Dict[str, str] = {}
        for path in paths:
            try:
                blob = self.repo.get_contents(path, ref=ref)
                if isinstance(blob, list):
                    continue  # A directory
                contents[path] = blob.decoded_content.decode("utf-8")
            except (GithubException, UnicodeDecodeError) as e:
                self.logger.warning(f"Skipping {path}: {e}")
        return contents

    def post_findings_summary(self, findings: List[SecurityFinding]) -> bool:
        """
        Post a summary comment of findings on the PR.

        Returns:
            True if the comment was posted
        """
        try:
            self.pr.create_issue_comment(format_findings_summary(findings))
            return True
        except GithubException as e:
            self.logger.error(f"Failed to post summary: {e}")
            return False


def format_findings_summary(findings: List[SecurityFinding]) -> str:
    """Markdown summary of findings grouped by severity."""
    body_parts = ["## Security Review Summary\n"]

    if not findings:
        body_parts.append("No security issues found.\n")
    else:
        by_severity: Dict[Severity, List[SecurityFinding]] = {}
        for finding in findings:
            by_severity.setdefault(finding.severity, []).append(finding)

        body_parts.append(f"Found **{len(findings)}** issues:\n")

        for severity in Severity:
            if severity in by_severity:
                body_parts.append(f"\n### {severity.value.upper()} ({len(by_severity[severity])})\n")
                for finding in by_severity[severity]:
                    location = finding.file_path
                    if finding.line_number is not None:
                        location += f":{finding.line_number}"
                    body_parts.append(f"- **{location}** - {finding.title}")

    body_parts.append("\n\n---\n*Reviewed by Security Review Agent*")
    return "\n".join(body_parts)
