#!/usr/bin/env python3
"""
Security Review Agent - Main Entry Point

Runs the Security Agent and gateway services, and analyzes files through
the gateway from the command line.

Usage:
    security-agent serve-agent
    security-agent serve-gateway
    security-agent analyze src/app.py src/db.py
    security-agent analyze --git-diff --commit main --stream
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List

from .config import AnalyzerConfig, GatewayConfig, load_rules_config
from .models import (
    AnalysisRequest,
    SecurityFinding,
    StartedEvent,
    FindingEvent,
    CompleteEvent,
    ErrorEvent,
)
from .tools import (
    GatewayClient,
    GatewayError,
    GitHubTool,
    filter_analyzable_files,
    get_changed_files,
    is_git_repository,
)
from .utils import setup_logging, get_logger


DEFAULT_GATEWAY_URL = "http://localhost:5000"


def _configure_logging(args) -> None:
    setup_logging(level=logging.DEBUG if getattr(args, "debug", False) else logging.INFO)


def cmd_serve_agent(args):
    """Handle 'serve-agent' subcommand."""
    import uvicorn
    from .services import create_analyzer_app

    _configure_logging(args)
    logger = get_logger()

    config = AnalyzerConfig.from_env()
    if args.host:
        config.host = args.host
    if args.port:
        config.port = args.port
    if args.rules:
        config.rules_path = args.rules
    if args.no_batching:
        config.enable_batching = False
    if args.no_rule_filter:
        config.enable_rule_filter = False

    try:
        rules_config = load_rules_config(config.rules_path)
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info(
        f"Loaded {len(rules_config.enabled_rules)} enabled rules "
        f"(batching={'on' if config.enable_batching else 'off'}, batch size {config.batch_size})"
    )

    app = create_analyzer_app(rules_config, config=config)
    uvicorn.run(app, host=config.host, port=config.port, log_level="info")


def cmd_serve_gateway(args):
    """Handle 'serve-gateway' subcommand."""
    import uvicorn
    from .services import create_gateway_app

    _configure_logging(args)
    logger = get_logger()

    config = GatewayConfig.from_env()
    if args.host:
        config.host = args.host
    if args.port:
        config.port = args.port

    logger.info(
        f"Gateway using Security Agent at {config.endpoints.security_agent_url}, "
        f"file service at {config.endpoints.file_service_url}"
    )

    app = create_gateway_app(config)
    uvicorn.run(app, host=config.host, port=config.port, log_level="info")


def collect_files(args) -> Dict[str, str]:
    """
    Resolve the files to analyze and read their contents.

    Returns:
        Mapping of display path to content

    Raises:
        ValueError: If the file selection is invalid
    """
    logger = get_logger()
    extensions = args.include_ext.split(",") if args.include_ext else None

    if args.repo or args.pr_number:
        if not (args.repo and args.pr_number):
            raise ValueError("--repo and --pr-number must be used together")
        github = GitHubTool(repo=args.repo, pr_number=args.pr_number)
        paths = github.get_changed_files(extensions)
        logger.info(f"PR #{args.pr_number}: {len(paths)} analyzable changed files")
        return github.get_file_contents(paths)

    if args.git_diff:
        if not is_git_repository():
            raise ValueError("Not inside a git repository. Use file paths instead of --git-diff")
        result = get_changed_files(staged=args.staged, commit=args.commit)
        logger.info(
            f"Git: {result.description} in {result.repository_root} ({len(result.changed_files)} files)"
        )
        files = filter_analyzable_files(result.changed_files, extensions)
        base = result.repository_root
    else:
        if not args.files:
            raise ValueError("No files specified. Use file paths or --git-diff")
        files = [Path(f) for f in args.files]
        if extensions:
            files = filter_analyzable_files(files, extensions)
        base = Path.cwd()

    contents: Dict[str, str] = {}
    for file_path in files:
        try:
            display = file_path.resolve().relative_to(base.resolve()).as_posix()
        except ValueError:
            display = file_path.as_posix()
        try:
            contents[display] = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ValueError(f"Failed to read {file_path}: {e}") from e
    return contents


def print_finding(finding: SecurityFinding) -> None:
    location = finding.file_path
    if finding.line_number is not None:
        location += f":{finding.line_number}"
    print(f"[{finding.severity.value.upper()}] {finding.title} ({finding.id})")
    print(f"  {location}")
    if finding.description:
        print(f"  {finding.description}")
    if finding.remediation:
        print(f"  Fix: {finding.remediation}")
    print()


async def run_analysis(gateway_url: str, request: AnalysisRequest, stream: bool) -> List[SecurityFinding]:
    """
    Send a request to the gateway and print findings.

    Raises:
        GatewayError: If the gateway fails or reports an unsuccessful analysis
    """
    findings: List[SecurityFinding] = []

    async with GatewayClient(gateway_url) as client:
        if stream:
            async for event in client.analyze_stream(request):
                if isinstance(event, StartedEvent):
                    print(f"Analyzing {event.file_count} files...\n")
                elif isinstance(event, FindingEvent):
                    findings.append(event.finding)
                    print_finding(event.finding)
                elif isinstance(event, CompleteEvent):
                    print(f"Complete: {event.total_findings} findings in {event.duration:.1f}s")
                    if event.error_message:
                        print(f"Warning: {event.error_message}")
                elif isinstance(event, ErrorEvent):
                    raise GatewayError(event.message)
            return findings

        for result in await client.analyze(request):
            if not result.success:
                raise GatewayError(f"{result.agent_type} agent failed: {result.error_message}")
            for finding in result.findings:
                findings.append(finding)
                print_finding(finding)
            print(f"{result.agent_type}: {len(result.findings)} findings in {result.duration:.1f}s")
            if result.error_message:
                print(f"Warning: {result.error_message}")

    return findings


def cmd_analyze(args):
    """Handle 'analyze' subcommand."""
    _configure_logging(args)
    logger = get_logger()

    try:
        contents = collect_files(args)
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    if not contents:
        print("No files to analyze.")
        sys.exit(0)

    print("Analyzing files...")
    for path in contents:
        print(f"  - {path}")
    print()

    request = AnalysisRequest(file_paths=tuple(contents), file_contents=contents)

    try:
        findings = asyncio.run(run_analysis(args.gateway_url, request, stream=args.stream))
    except GatewayError as e:
        logger.error(f"Analysis failed: {e}")
        sys.exit(1)

    if args.post_summary and args.repo and args.pr_number:
        github = GitHubTool(repo=args.repo, pr_number=args.pr_number)
        if not github.post_findings_summary(findings):
            logger.warning("Failed to post summary comment")

    sys.exit(0)


def cmd_health(args):
    """Handle 'health' subcommand."""
    _configure_logging(args)
    logger = get_logger()

    async def check() -> dict:
        async with GatewayClient(args.gateway_url, timeout=10.0) as client:
            return await client.health()

    try:
        health = asyncio.run(check())
    except GatewayError as e:
        logger.error(str(e))
        sys.exit(1)

    print(f"{health.get('service', 'gateway')} ({health.get('status', 'unknown')})")
    sys.exit(0)


def cmd_init(args):
    """Handle 'init' subcommand."""
    from .cli import init_rules_file

    target = Path(args.path) if args.path else Path.cwd()
    success = init_rules_file(target)
    sys.exit(0 if success else 1)


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="AI-powered code security analysis"
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # serve-agent command
    agent_parser = subparsers.add_parser("serve-agent", help="Run the Security Agent service")
    agent_parser.add_argument("--host", type=str, help="Bind address (default: AGENT_HOST or 127.0.0.1)")
    agent_parser.add_argument("--port", type=int, help="Port (default: AGENT_PORT or 5001)")
    agent_parser.add_argument("--rules", type=str, help="Rules JSON file (default: SECURITY_RULES_PATH)")
    agent_parser.add_argument("--no-batching", action="store_true", help="Analyze every file in its own session")
    agent_parser.add_argument("--no-rule-filter", action="store_true", help="Keep findings outside enabled rules")
    agent_parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    # serve-gateway command
    gateway_parser = subparsers.add_parser("serve-gateway", help="Run the gateway service")
    gateway_parser.add_argument("--host", type=str, help="Bind address (default: GATEWAY_HOST or 127.0.0.1)")
    gateway_parser.add_argument("--port", type=int, help="Port (default: GATEWAY_PORT or 5000)")
    gateway_parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    # analyze command
    analyze_parser = subparsers.add_parser("analyze", help="Analyze source files for security vulnerabilities")
    analyze_parser.add_argument("files", nargs="*", help="Files to analyze")
    analyze_parser.add_argument("--git-diff", action="store_true", help="Analyze changed files from git diff")
    diff_group = analyze_parser.add_mutually_exclusive_group()
    diff_group.add_argument("--staged", action="store_true", help="Only staged changes (with --git-diff)")
    diff_group.add_argument("--commit", type=str, metavar="REF", help="Changes since REF (with --git-diff)")
    analyze_parser.add_argument("--repo", type=str, help="Analyze a GitHub PR: repository owner/repo")
    analyze_parser.add_argument("--pr-number", type=int, help="Analyze a GitHub PR: pull request number")
    analyze_parser.add_argument("--post-summary", action="store_true", help="Post a findings summary on the PR")
    analyze_parser.add_argument("--include-ext", type=str, help="Only these extensions (comma-separated)")
    analyze_parser.add_argument("--stream", action="store_true", help="Print findings as they are produced")
    analyze_parser.add_argument(
        "--gateway-url",
        type=str,
        default=os.environ.get("SECURITY_GATEWAY_URL", DEFAULT_GATEWAY_URL),
        help=f"Gateway API URL (default: SECURITY_GATEWAY_URL or {DEFAULT_GATEWAY_URL})"
    )
    analyze_parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    # health command
    health_parser = subparsers.add_parser("health", help="Check if the gateway is healthy")
    health_parser.add_argument(
        "--gateway-url",
        type=str,
        default=os.environ.get("SECURITY_GATEWAY_URL", DEFAULT_GATEWAY_URL),
        help="Gateway API URL"
    )

    # init command
    init_parser = subparsers.add_parser("init", help="Write a default security rules file")
    init_parser.add_argument(
        "path",
        nargs="?",
        help="Target directory (default: current directory)"
    )

    args = parser.parse_args()

    if args.command == "analyze" and (args.staged or args.commit) and not args.git_diff:
        parser.error("--staged and --commit require --git-diff")

    # Route to subcommand
    if args.command == "serve-agent":
        cmd_serve_agent(args)
    elif args.command == "serve-gateway":
        cmd_serve_gateway(args)
    elif args.command == "analyze":
        cmd_analyze(args)
    elif args.command == "health":
        cmd_health(args)
    elif args.command == "init":
        cmd_init(args)
    else:
        # No subcommand - show help
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
