"""Analysis engine: run analysis units through the AI backend."""

import asyncio
from typing import AsyncIterator, List, Optional, Tuple

from ..config import AnalyzerConfig, DEFAULT_ANALYZER_CONFIG
from ..models import AnalysisRequest, AnalysisUnit, SecurityFinding, SecurityRulesConfig
from ..utils import get_logger
from .batching import plan_units, single_file_units
from .prompts import build_file_prompt, build_prompt
from .reconcile import match_file_path
from .response_parser import extract_findings
from .rule_filter import RuleFilter
from .session import SessionError, SessionFactory, run_session, claude_session_factory


ANALYZER_SYSTEM_PROMPT = """You are a security analysis expert reviewing source code for vulnerabilities.
Reply with the requested JSON array only."""


class SecurityAnalyzer:
    """
    Runs one analysis request through the AI backend.

    Owns its sessions for the lifetime of the run; build a new analyzer per
    request. Units are processed strictly one at a time, each in a fresh
    session. A failed multi-file unit falls back to per-file analysis.
    """

    def __init__(
        self,
        rules_config: SecurityRulesConfig,
        config: Optional[AnalyzerConfig] = None,
        session_factory: Optional[SessionFactory] = None,
    ):
        """
        Initialize the analyzer.

        Args:
            rules_config: Rule configuration (read-only, may be shared)
            config: Batching and filtering settings
            session_factory: Creates a backend session per unit
                (defaults to Claude Agent SDK sessions)
        """
        self.rules_config = rules_config
        self.config = config or DEFAULT_ANALYZER_CONFIG
        self.session_factory = session_factory or claude_session_factory(
            system_prompt=ANALYZER_SYSTEM_PROMPT,
            model=rules_config.model,
            max_turns=self.config.max_turns,
        )
        self.rule_filter = RuleFilter(
            rules_config.enabled_categories,
            enabled=self.config.enable_rule_filter,
        )
        self.logger = get_logger(__name__)

        # Per-file failures recorded during the run (single-file units and fallback files)
        self.errors: List[str] = []
        self.files_planned = 0

    def plan(self, request: AnalysisRequest) -> List[AnalysisUnit]:
        """Split a request into analysis units."""
        if self.config.enable_batching:
            return plan_units(
                request.file_paths,
                request.file_contents,
                max_count=self.config.batch_size,
                max_tokens=self.config.max_batch_tokens,
            )
        return single_file_units(request.file_paths, request.file_contents)

    def summary(self) -> Tuple[bool, Optional[str]]:
        """
        Outcome of the last run.

        Returns:
            (success, error_message). success is False only when every planned
            file failed; error_message lists the failed files whenever any did.
        """
        if not self.errors:
            return True, None

        message = f"{len(self.errors)} of {self.files_planned} files failed: " + "; ".join(self.errors)
        return len(self.errors) < self.files_planned, message

    async def analyze(self, request: AnalysisRequest) -> List[SecurityFinding]:
        """
        Analyze all files in a request and collect the findings.

        Returns:
            Findings in submission order (unit order, then response order)
        """
        findings: List[SecurityFinding] = []
        async for finding in self.analyze_stream(request):
            findings.append(finding)
        return findings

    async def analyze_stream(
        self,
        request: AnalysisRequest,
        cancel: Optional[asyncio.Event] = None,
    ) -> AsyncIterator[SecurityFinding]:
        """
        Analyze a request, yielding findings as each unit completes.

        Args:
            request: Files to analyze
            cancel: Checked before each unit and each fallback file; an
                in-flight session is not interrupted

        Yields:
            SecurityFinding objects in submission order
        """
        units = self.plan(request)
        self.errors = []
        self.files_planned = sum(len(unit) for unit in units)
        self.logger.info(
            f"Starting security analysis for {len(request.file_paths)} files in {len(units)} units"
        )

        total = 0
        for index, unit in enumerate(units, start=1):
            if cancel is not None and cancel.is_set():
                self.logger.info("Analysis cancelled")
                return

            self.logger.info(f"[{index}/{len(units)}] Analyzing {len(unit)} file(s): {', '.join(unit.paths)}")

            if unit.is_single_file:
                path, content = unit.files[0]
                unit_findings = await self._analyze_file_isolated(path, content)
                for finding in unit_findings:
                    total += 1
                    yield finding
                continue

            try:
                unit_findings = await self.run_unit(unit)
            except SessionError as e:
                self.logger.error(f"Unit {index} failed ({e}); falling back to per-file analysis")
                async for finding in self._fallback(unit, cancel):
                    total += 1
                    yield finding
                continue

            for finding in unit_findings:
                total += 1
                yield finding

        self.logger.info(f"Security analysis complete. Found {total} issues")

    async def run_unit(self, unit: AnalysisUnit) -> List[SecurityFinding]:
        """
        Analyze a unit in one backend session.

        Single-file units attribute every finding to their file. Multi-file
        units reconcile each finding's claimed path and drop unmatched ones.

        Raises:
            SessionError: If the backend session fails
        """
        if unit.is_single_file:
            path, content = unit.files[0]
            return await self.analyze_file(path, content)

        prompt = build_prompt(unit, self.rules_config)
        response = await run_session(self.session_factory(), prompt)

        valid_paths = unit.paths
        findings = []
        for raw in extract_findings(response):
            matched = match_file_path(raw.file_path, valid_paths)
            if matched is None:
                self.logger.warning(
                    f"Dropping finding '{raw.title}': path {raw.file_path!r} matches no file in the unit"
                )
                continue
            findings.append(raw.to_finding(matched))

        return self.rule_filter.apply(findings)

    async def analyze_file(self, path: str, content: str) -> List[SecurityFinding]:
        """
        Analyze a single file in its own session.

        Raises:
            SessionError: If the backend session fails
        """
        prompt = build_file_prompt(path, content, self.rules_config)
        response = await run_session(self.session_factory(), prompt)
        self.logger.info(f"Received response for {path}")

        findings = [raw.to_finding(path) for raw in extract_findings(response)]
        return self.rule_filter.apply(findings)

    async def _analyze_file_isolated(self, path: str, content: str) -> List[SecurityFinding]:
        """Single-file analysis where a failure yields no findings."""
        try:
            return await self.analyze_file(path, content)
        except SessionError as e:
            self.logger.error(f"Error analyzing file {path}: {e}")
            self.errors.append(f"{path}: {e}")
            return []

    async def _fallback(
        self,
        unit: AnalysisUnit,
        cancel: Optional[asyncio.Event],
    ) -> AsyncIterator[SecurityFinding]:
        """Re-analyze each file of a failed unit on its own."""
        for path, content in unit.files:
            if cancel is not None and cancel.is_set():
                return
            for finding in await self._analyze_file_isolated(path, content):
                yield finding
