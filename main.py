"""Job Hunter — CLI entrypoint."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv


def setup_logging(log_level: str = "INFO") -> None:
    """Configure logging to both console and log file."""
    log_dir = Path("logs")
    log_dir.mkdir(exist_ok=True)

    run_date = datetime.now().strftime("%Y-%m-%d")
    log_file = log_dir / f"run_{run_date}.log"

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stderr),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Job Hunter — turn job posting pages into structured, saved records",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py settings --api-key KEY      # Store the Gemini API key
  python main.py scan --url https://...      # Fetch a posting and save it
  python main.py scan --html-file job.html --url https://...
  python main.py list                        # Saved jobs, newest first
  python main.py status <id> Applied         # Update application status
        """,
    )
    parser.add_argument("--config", default=None, help="Optional YAML config file")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override (DEBUG, INFO, WARNING, ERROR)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="Extract and save the job on one page")
    scan.add_argument("--url", required=True, help="Page URL (also the stored source URL)")
    scan.add_argument("--html-file", default=None, help="Read the page from this file instead of fetching it")
    scan.add_argument("--title", default=None, help="Page title override")

    sub.add_parser("list", help="List saved jobs")

    show = sub.add_parser("show", help="Print one saved job as text or JSON")
    show.add_argument("job_id")
    show.add_argument("--json", action="store_true", help="Print the stored JSON record")

    status = sub.add_parser("status", help="Update a job's status")
    status.add_argument("job_id")
    status.add_argument("status", choices=["Saved", "Applied", "Rejected", "Interview"])

    delete = sub.add_parser("delete", help="Delete a saved job")
    delete.add_argument("job_id")

    sub.add_parser("dedupe", help="Remove duplicate records")
    sub.add_parser("stats", help="Show processing and storage statistics")

    settings = sub.add_parser("settings", help="Show or update settings")
    settings.add_argument("--api-key", default=None)
    settings.add_argument("--model", default=None)
    settings.add_argument("--max-jobs", type=int, default=None)

    sub.add_parser("test-api", help="Check the configured API key and model")

    summarize = sub.add_parser("summarize", help="Summarize a text or HTML file")
    summarize.add_argument("file")
    summarize.add_argument("--max-length", type=int, default=None)
    summarize.add_argument("--focus", default=None)

    sub.add_parser("agents", help="List available agents")
    return parser


# =============================================================================
# Commands
# =============================================================================


def _cmd_scan(processor, args) -> int:
    from job_hunter.tools.page_fetcher import fetch_page

    if args.html_file:
        page = Path(args.html_file).read_text(encoding="utf-8")
    else:
        page = fetch_page(args.url)

    response = processor.scan_page(args.url, page, title=args.title, user_agent="job-hunter-cli")
    if not response.success:
        print(f"Failed: {response.error}")
        return 1
    print(f"Saved {response.job_title} at {response.company_name} ({response.job_id})")
    return 0


def _cmd_list(processor, args) -> int:
    from job_hunter.report.export import format_date, format_salary, truncate_text

    jobs = processor.get_saved_jobs()
    if not jobs:
        print("No saved jobs.")
        return 0
    for job in jobs:
        ai = job.ai_data
        print(
            f"{job.id}  {format_date(job.saved_date):<12} {job.status.value:<10} "
            f"{truncate_text(ai.job_title, 40):<43} {truncate_text(ai.company_name, 25):<28} "
            f"{format_salary(ai.compensation)}"
        )
    return 0


def _cmd_show(processor, args) -> int:
    from job_hunter.report.export import generate_job_text_content

    job = processor.get_job(args.job_id)
    if job is None:
        print(f"No job with id {args.job_id}")
        return 1
    if args.json:
        print(json.dumps(job.to_dict(), indent=2))
    else:
        print(generate_job_text_content(job))
    return 0


def _cmd_status(processor, args) -> int:
    if not processor.update_job_status(args.job_id, args.status):
        print(f"No job with id {args.job_id}")
        return 1
    print(f"{args.job_id} -> {args.status}")
    return 0


def _cmd_delete(processor, args) -> int:
    if not processor.delete_job(args.job_id):
        print(f"No job with id {args.job_id}")
        return 1
    print(f"Deleted {args.job_id}")
    return 0


def _cmd_dedupe(processor, args) -> int:
    result = processor.cleanup_duplicates()
    print(f"Removed {result['removed']} duplicate(s), {result['remaining']} remaining")
    return 0


def _cmd_stats(processor, args) -> int:
    stats = processor.get_processing_stats()
    storage = processor.get_storage_stats()
    print(json.dumps({**stats.model_dump(), "storage": storage}, indent=2))
    return 0


def _cmd_settings(processor, args) -> int:
    if args.api_key is not None or args.model is not None or args.max_jobs is not None:
        settings = processor.save_settings(
            api_key=args.api_key, model_name=args.model, max_jobs=args.max_jobs
        )
    else:
        settings = processor.get_settings()
    masked = f"{settings.api_key[:4]}..." if settings.api_key else "(not set)"
    print(f"API key:  {masked}")
    print(f"Model:    {settings.model_name}")
    print(f"Max jobs: {settings.max_jobs}")
    return 0


def _cmd_test_api(processor, args) -> int:
    if processor.test_api_connection():
        print("API connection successful")
        return 0
    print("API connection failed")
    return 1


def _cmd_summarize(processor, args) -> int:
    from job_hunter.tools.content_extractor import extract_job_content

    text = Path(args.file).read_text(encoding="utf-8")
    if args.file.endswith((".html", ".htm")):
        text = extract_job_content(text).content

    result = processor.summarize(text, max_length=args.max_length, focus=args.focus)
    print(result.summary)
    for point in result.key_points:
        print(f"- {point}")
    return 0


def _cmd_agents(processor, args) -> int:
    from job_hunter.agents.registry import list_agents

    for agent in list_agents():
        print(f"{agent['name']:<18} {agent['description']}")
    return 0


COMMANDS = {
    "scan": _cmd_scan,
    "list": _cmd_list,
    "show": _cmd_show,
    "status": _cmd_status,
    "delete": _cmd_delete,
    "dedupe": _cmd_dedupe,
    "stats": _cmd_stats,
    "settings": _cmd_settings,
    "test-api": _cmd_test_api,
    "summarize": _cmd_summarize,
    "agents": _cmd_agents,
}


def main(argv: list[str] | None = None) -> None:
    """Main CLI entrypoint for Job Hunter."""
    args = build_parser().parse_args(argv)

    # Load environment variables
    load_dotenv()

    from job_hunter.config import load_config
    from job_hunter.errors import JobHunterError
    from job_hunter.processor import JobProcessor

    # Setup logging
    setup_logging(args.log_level or os.getenv("LOG_LEVEL") or "INFO")
    logger = logging.getLogger("job_hunter")

    processor = None
    try:
        config = load_config(args.config)
        if not args.log_level and not os.getenv("LOG_LEVEL"):
            logging.getLogger().setLevel(getattr(logging, config.log_level.upper(), logging.INFO))
        processor = JobProcessor(config)
        exit_code = COMMANDS[args.command](processor, args)
    except JobHunterError as e:
        logger.error("%s failed: %s", args.command, e.message)
        print(f"Failed: {e.message}")
        exit_code = 1
    except ValueError as e:
        # Bad configuration values, including pydantic validation errors
        logger.error("%s failed: %s", args.command, e)
        print(f"Failed: {e}")
        exit_code = 1
    except Exception as e:
        logger.error("%s failed: %s", args.command, e, exc_info=True)
        exit_code = 1
    finally:
        if processor is not None:
            processor.close()

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
