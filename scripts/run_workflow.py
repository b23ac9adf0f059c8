"""CLI runner and scheduler for the research digest jobs.

Usage:
    python scripts/run_workflow.py morning
    python scripts/run_workflow.py evening --secret "$CRON_SECRET"
    python scripts/run_workflow.py status
    python scripts/run_workflow.py test-email
    python scripts/run_workflow.py preview --out preview.html
    python scripts/run_workflow.py covered --limit 20
    python scripts/run_workflow.py schedule
"""

from __future__ import annotations

import argparse
import json
import sys
from functools import lru_cache
from pathlib import Path

from src.core.config import get_config
from src.core.logger import get_logger, setup_logging
from src.generators import DigestRenderer, load_preview_sample
from src.publishers.email_notifier import EmailNotifier
from src.storage import (
    FallbackStore,
    MemoryCache,
    build_covered_topics_ledger,
    build_daily_run_ledger,
    build_store,
)
from src.workflows import (
    EveningCatchupWorkflow,
    MorningDigestWorkflow,
    WorkflowResult,
    get_system_status,
    verify_cron_secret,
)

logger = get_logger(__name__)

# One cache per process; the scheduler reuses it across job runs.
_CACHE = MemoryCache()


@lru_cache(maxsize=1)
def _store() -> FallbackStore:
    return build_store(_CACHE)


def _print_result(result: WorkflowResult) -> None:
    """Print workflow result summary to stdout.

    Args:
        result: WorkflowResult to display.
    """
    status = "SUCCESS" if result.success else "FAILED"
    print(f"\n{'=' * 60}")
    print(f"  Job:      {result.job_type}")
    print(f"  Status:   {status}")
    print(f"  Elapsed:  {result.elapsed_sec}s")
    print(f"  Findings: {result.queries_processed}")
    print(f"  Urgent:   {result.urgent_items_found}")
    print(f"  Emailed:  {'yes' if result.email_sent else 'no'}")
    if result.errors:
        print(f"  Errors:   {len(result.errors)}")
        for err in result.errors:
            print(f"    - {err}")
    for key, value in result.data.items():
        print(f"  {key}: {value}")
    print(f"{'=' * 60}\n")


def run_morning() -> WorkflowResult:
    """Run the morning digest."""
    store = _store()
    workflow = MorningDigestWorkflow(
        build_covered_topics_ledger(store),
        build_daily_run_ledger(store),
    )
    return workflow.run()


def run_evening() -> WorkflowResult:
    """Run the evening catch-up."""
    return EveningCatchupWorkflow(build_daily_run_ledger(_store())).run()


def show_status() -> int:
    report = get_system_status(build_daily_run_ledger(_store()))
    print(json.dumps(report.model_dump(mode="json", by_alias=False), indent=2))
    return 0


def send_test_email() -> int:
    html = DigestRenderer().render_test_email()
    result = EmailNotifier().send_test_email(html)
    if result.success:
        print(f"Test email sent (id: {result.message_id})")
        return 0
    print(f"Test email failed: {result.error}", file=sys.stderr)
    return 1


def render_preview(evening: bool, out: str | None) -> int:
    """Render the digest from sample data without sending it."""
    sample = load_preview_sample()
    renderer = DigestRenderer()
    if evening:
        html = renderer.render_evening(sample.urgent_items)
    else:
        html = renderer.render_morning(sample.findings, sample.urgent_items, sample.blog_topics)

    if out:
        Path(out).write_text(html, encoding="utf-8")
        print(f"Preview written to {out}")
    else:
        print(html)
    return 0


def show_covered(limit: int) -> int:
    ledger = build_covered_topics_ledger(_store())
    print(ledger.summary(limit=limit))
    return 0


def _scheduled(job) -> None:
    """Run a job from the scheduler, logging instead of exiting."""
    result = job()
    logger.info(
        "scheduled_job_finished",
        job=result.job_type,
        success=result.success,
        error_count=len(result.errors),
    )


def start_scheduler() -> None:
    """Start the APScheduler daemon with configured schedule times.

    Runs until interrupted (Ctrl+C).
    """
    from apscheduler.schedulers.blocking import BlockingScheduler
    from apscheduler.triggers.cron import CronTrigger

    config = get_config()
    tz = config.schedule.timezone

    scheduler = BlockingScheduler(timezone=tz)

    morning_time = config.schedule.morning_digest
    h, m = morning_time.split(":")
    scheduler.add_job(
        _scheduled,
        CronTrigger(hour=int(h), minute=int(m), timezone=tz),
        args=[run_morning],
        id="morning_digest",
        name="Morning Digest",
        misfire_grace_time=600,
    )
    logger.info("job_scheduled", job="morning_digest", time=morning_time)

    evening_time = config.schedule.evening_catchup
    h, m = evening_time.split(":")
    scheduler.add_job(
        _scheduled,
        CronTrigger(hour=int(h), minute=int(m), timezone=tz),
        args=[run_evening],
        id="evening_catchup",
        name="Evening Catch-up",
        misfire_grace_time=600,
    )
    logger.info("job_scheduled", job="evening_catchup", time=evening_time)

    print(f"\nScheduler started (timezone: {tz})")
    print(f"  Morning digest:   {morning_time}")
    print(f"  Evening catch-up: {evening_time}")
    print("\nPress Ctrl+C to stop.\n")

    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("scheduler_stopped")
        print("\nScheduler stopped.")


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        description="Realty Research Digest - job runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python scripts/run_workflow.py morning\n"
            "  python scripts/run_workflow.py evening\n"
            "  python scripts/run_workflow.py preview --evening\n"
            "  python scripts/run_workflow.py schedule\n"
        ),
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    for name, help_text in (
        ("morning", "Run the morning digest now"),
        ("evening", "Run the evening catch-up now"),
    ):
        job_parser = subparsers.add_parser(name, help=help_text)
        job_parser.add_argument(
            "--secret", default=None,
            help="Shared secret (or 'Bearer <secret>'); required when CRON_SECRET is set",
        )

    subparsers.add_parser("status", help="Print system health as JSON")
    subparsers.add_parser("test-email", help="Send a test email")

    preview_parser = subparsers.add_parser("preview", help="Render sample digest HTML")
    preview_parser.add_argument("--evening", action="store_true", help="Render the evening alert")
    preview_parser.add_argument("--out", default=None, help="Write HTML to this file")

    covered_parser = subparsers.add_parser("covered", help="List recently covered topics")
    covered_parser.add_argument("--limit", type=int, default=10, help="Topics to show (default: 10)")

    subparsers.add_parser("schedule", help="Start the scheduler daemon")

    return parser


def main() -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = get_config()
    setup_logging(
        level=config.log_level or config.logging.level,
        format=config.logging.format,
        log_file=config.logging.file,
    )

    if args.command in ("morning", "evening") and not verify_cron_secret(args.secret):
        logger.warning("unauthorized_job_request", command=args.command)
        print("Unauthorized", file=sys.stderr)
        sys.exit(1)

    if args.command == "schedule":
        start_scheduler()
        return

    if args.command == "status":
        sys.exit(show_status())
    if args.command == "test-email":
        sys.exit(send_test_email())
    if args.command == "preview":
        sys.exit(render_preview(args.evening, args.out))
    if args.command == "covered":
        sys.exit(show_covered(args.limit))

    result = run_morning() if args.command == "morning" else run_evening()
    _print_result(result)
    sys.exit(0 if result.success else 1)


if __name__ == "__main__":
    main()
