#!/usr/bin/env python3
"""
AI PR Review Bot - Main Entry Point

Reviews the changed files of a GitHub Pull Request with a model served by
AWS Bedrock, posts the findings as review comments followed by a summary,
and applies suggested fixes on `/apply-fix` replies.

Usage:
    python -m review_bot.main review --repo owner/repo --pr-number 123
    python -m review_bot.main apply-fix --repo owner/repo --pr-number 123 --comment-id 456

Or via GitHub Actions:
    review-bot run
"""

import argparse
import asyncio
import json
import logging
import os
import sys
import time
from typing import Optional

from github import GithubException

from .config import ReviewConfig, parse_exclude_patterns
from .models import FileAnalysis, ReviewContext
from .pipeline import (
    select_files,
    make_exclude_predicate,
    build_request_payload,
    parse_response,
    filter_by_severity,
    post_issue_comment,
    publish_summary,
    is_apply_fix_command,
    handle_apply_fix,
)
from .tools import GitHubTool, BedrockTool, FileContentError, InferenceError, parse_patch, format_hunks
from .utils import setup_logging, get_logger, calculate_metrics


async def review_file(
    github: GitHubTool,
    bedrock: BedrockTool,
    config: ReviewConfig,
    path: str,
    patch: Optional[str]
) -> FileAnalysis:
    """
    Analyze one file and publish its issues.

    Content fetch and inference failures are recorded on the returned
    FileAnalysis instead of being raised.
    """
    logger = get_logger()

    try:
        content = github.get_file_content(path)
    except (GithubException, FileContentError) as e:
        logger.warning(f"Skipping {path}: failed to fetch content: {e}")
        return FileAnalysis(path=path, error=str(e))

    if patch:
        logger.debug(f"Diff for {path}:\n{format_hunks(parse_patch(patch))}")

    payload = build_request_payload(path, content, config.model_id)
    try:
        response = await bedrock.invoke(payload)
    except InferenceError as e:
        logger.warning(f"Skipping {path}: {e}")
        return FileAnalysis(path=path, error=str(e))

    issues = parse_response(response)
    reportable = filter_by_severity(issues, config.comment_threshold)
    logger.info(
        f"{path}: {len(issues)} issues found, {len(reportable)} at or above {config.comment_threshold}"
    )

    analysis = FileAnalysis(path=path, issues=reportable)
    for issue in reportable:
        outcome = post_issue_comment(github, path, patch, issue)
        if outcome == "inline":
            analysis.inline_comments += 1
        elif outcome == "fallback":
            analysis.fallback_comments += 1

    return analysis


async def run_review(
    config: ReviewConfig,
    context: Optional[ReviewContext] = None,
    github: Optional[GitHubTool] = None,
    bedrock: Optional[BedrockTool] = None
) -> dict:
    """
    Run the complete PR review pipeline.

    Files are processed strictly one after another, in the order the
    platform lists them.

    Args:
        config: Review configuration
        context: PR identity (defaults to config.repo / config.pr_number)
        github: Platform wrapper (built from config when omitted)
        bedrock: Inference wrapper (built from config when omitted)

    Returns:
        Dictionary with review statistics

    Raises:
        GithubException: if the changed files cannot be listed
    """
    logger = get_logger()
    started = time.monotonic()

    context = context or ReviewContext(repo=config.repo, pr_number=config.pr_number)
    logger.info(f"Starting review for {context.repo} PR #{context.pr_number}")

    if github is None:
        github = GitHubTool(context, token=config.github_token)
    if bedrock is None:
        bedrock = BedrockTool(
            model_id=config.model_id,
            region=config.aws_region,
            timeout=config.inference_timeout,
        )

    logger.info("Fetching changed files...")
    files = github.get_changed_files()
    paths = select_files(files, make_exclude_predicate(config.exclude_patterns), config.max_files)
    patches = {f.path: f.patch for f in files}

    logger.info(f"Analyzing {len(paths)} of {len(files)} changed files...")

    analyses = []
    for path in paths:
        analyses.append(await review_file(github, bedrock, config, path, patches.get(path)))

    if config.post_summary:
        logger.info("Posting review summary...")
        metrics = publish_summary(github, analyses, request_changes=config.request_changes)
    else:
        metrics = calculate_metrics(analyses)

    metrics.review_duration_ms = int((time.monotonic() - started) * 1000)

    stats = {
        "status": "completed",
        "files_analyzed": metrics.files_analyzed,
        "files_failed": metrics.files_failed,
        "reported": metrics.total_issues,
        "blocking": metrics.blocking_count,
        "inline_comments": metrics.inline_comments,
        "fallback_comments": metrics.fallback_comments,
        "duration_ms": metrics.review_duration_ms,
    }

    logger.info("Review complete!")
    return stats


def _load_config(args) -> ReviewConfig:
    """Build config from env and apply CLI overrides."""
    config = ReviewConfig.from_env()

    if getattr(args, "repo", None):
        config.repo = args.repo
    if getattr(args, "pr_number", None):
        config.pr_number = args.pr_number
    if getattr(args, "max_files", None):
        config.max_files = args.max_files
    if getattr(args, "comment_threshold", None):
        config.comment_threshold = args.comment_threshold
    if getattr(args, "model_id", None):
        config.model_id = args.model_id
    if getattr(args, "exclude", None):
        config.exclude_patterns = parse_exclude_patterns("\n".join(args.exclude))
    if getattr(args, "no_summary", False):
        config.post_summary = False

    return config


def cmd_review(args):
    """Handle 'review' subcommand."""
    setup_logging(level=logging.DEBUG if args.debug else logging.INFO)
    logger = get_logger()

    try:
        config = _load_config(args)
        config.validate()
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        stats = asyncio.run(run_review(config))
        logger.info(f"Review stats: {stats}")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Review failed: {e}")
        sys.exit(1)


def cmd_apply_fix(args):
    """Handle 'apply-fix' subcommand."""
    setup_logging(level=logging.DEBUG if args.debug else logging.INFO)
    logger = get_logger()

    try:
        config = _load_config(args)
        config.validate()
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    context = ReviewContext(repo=config.repo, pr_number=config.pr_number)

    try:
        github = GitHubTool(context, token=config.github_token)
        applied = asyncio.run(handle_apply_fix(github, args.comment_id))
        logger.info("Fix applied" if applied else "No fix applied")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Apply-fix failed: {e}")
        sys.exit(1)


def cmd_run(args):
    """Handle 'run' subcommand: dispatch on the GitHub Actions event."""
    setup_logging(level=logging.DEBUG if args.debug else logging.INFO)
    logger = get_logger()

    event_name = os.environ.get("GITHUB_EVENT_NAME", "")
    event_path = os.environ.get("GITHUB_EVENT_PATH", "")
    if not event_path:
        logger.error("GITHUB_EVENT_PATH not set; 'run' must be used inside GitHub Actions")
        sys.exit(1)

    with open(event_path, encoding="utf-8") as f:
        event = json.load(f)

    try:
        config = ReviewConfig.from_env()
        context = ReviewContext.from_event(config.repo, event)
        config.pr_number = context.pr_number
        config.validate()
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        if event_name == "pull_request":
            stats = asyncio.run(run_review(config, context=context))
            logger.info(f"Review stats: {stats}")
        elif event_name in ("pull_request_review_comment", "issue_comment"):
            comment = event.get("comment") or {}
            if not is_apply_fix_command(comment.get("body")):
                logger.info("Comment is not an apply-fix command, nothing to do")
                sys.exit(0)
            github = GitHubTool(context, token=config.github_token)
            asyncio.run(handle_apply_fix(github, comment.get("in_reply_to_id")))
        else:
            logger.info(f"Ignoring event '{event_name}'")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Run failed: {e}")
        sys.exit(1)


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="AI PR Review Bot using AWS Bedrock"
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # review command
    review_parser = subparsers.add_parser("review", help="Run PR review")
    review_parser.add_argument(
        "--repo",
        type=str,
        help="Repository in format owner/repo"
    )
    review_parser.add_argument(
        "--pr-number",
        type=int,
        help="Pull request number"
    )
    review_parser.add_argument(
        "--max-files",
        type=int,
        help="Maximum number of files to analyze (default: 10)"
    )
    review_parser.add_argument(
        "--comment-threshold",
        type=str,
        help="Minimum severity to comment: CRÍTICA, ALTA, MEDIA, BAJA (default: MEDIA)"
    )
    review_parser.add_argument(
        "--model-id",
        type=str,
        help="Bedrock model identifier"
    )
    review_parser.add_argument(
        "--exclude",
        action="append",
        help="Glob pattern of files to skip (repeatable)"
    )
    review_parser.add_argument(
        "--no-summary",
        action="store_true",
        help="Don't post summary comment"
    )
    review_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    # apply-fix command
    fix_parser = subparsers.add_parser(
        "apply-fix",
        help="Apply the fix suggested in a review comment"
    )
    fix_parser.add_argument(
        "--repo",
        type=str,
        help="Repository in format owner/repo"
    )
    fix_parser.add_argument(
        "--pr-number",
        type=int,
        help="Pull request number"
    )
    fix_parser.add_argument(
        "--comment-id",
        type=int,
        required=True,
        help="Id of the review comment holding the suggested fix"
    )
    fix_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    # run command (GitHub Actions)
    run_parser = subparsers.add_parser(
        "run",
        help="Handle the current GitHub Actions event"
    )
    run_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args()

    # Route to subcommand
    if args.command == "review":
        cmd_review(args)
    elif args.command == "apply-fix":
        cmd_apply_fix(args)
    elif args.command == "run":
        cmd_run(args)
    else:
        # No subcommand - show help
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
