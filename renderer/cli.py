"""Command-line entry point: render a list of URLs to PDFs and wait for the result."""
import argparse
import asyncio
import logging
import signal
import sys
from typing import List, Optional

from renderer.controller import JobController
from shared.config import settings
from shared.utils import validate_url
from storage.job_store import JobStatus, JobStore, UrlStatus

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="url2pdf",
        description="Convert web pages to PDF files with a headless browser."
    )
    parser.add_argument("urls", nargs="+", help="Absolute http(s) URLs to convert")
    parser.add_argument(
        "-o", "--output",
        default=settings.default_output_dir,
        help=f"Output directory (default: {settings.default_output_dir})"
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=settings.status_poll_interval,
        help="Seconds between status polls"
    )
    return parser.parse_args(argv)


async def run(urls: List[str], output: str, poll_interval: float,
              controller: Optional[JobController] = None) -> int:
    """Submit one job, report progress until it finishes, and return an exit code."""
    controller = controller or JobController(JobStore())
    job_id = await controller.submit(urls, output)

    loop = asyncio.get_running_loop()
    handles_sigint = True
    try:
        loop.add_signal_handler(signal.SIGINT, lambda: asyncio.create_task(controller.cancel(job_id)))
    except (NotImplementedError, RuntimeError):
        # Signal handlers are unavailable on some platforms and outside the main thread
        handles_sigint = False

    try:
        job = await _follow_job(controller, job_id, poll_interval)
        await controller.join(job_id)
    finally:
        if handles_sigint:
            loop.remove_signal_handler(signal.SIGINT)

    logger.info(
        f"Job {job_id} {job['status']}: {job['success_count']} succeeded, "
        f"{job['fail_count']} failed, output in {job['output_path']}"
    )
    if job["error"]:
        logger.error(f"Job error: {job['error']}")

    if job["status"] == JobStatus.COMPLETED and job["fail_count"] == 0:
        return 0
    return 1


async def _follow_job(controller: JobController, job_id: str, poll_interval: float) -> dict:
    """Poll a job, logging each URL as it finishes, and return the final record."""
    reported = set()
    while True:
        job = await controller.get_status(job_id)
        total = len(job["url_statuses"])
        for index, entry in enumerate(job["url_statuses"]):
            if entry["status"] not in (UrlStatus.COMPLETE, UrlStatus.FAILED) or index in reported:
                continue
            reported.add(index)
            if entry["status"] == UrlStatus.COMPLETE:
                logger.info(f"[{index + 1}/{total}] done: {entry['url']}")
            else:
                logger.error(f"[{index + 1}/{total}] failed: {entry['url']}: {entry['error']}")
        if job["completed"]:
            return job
        await asyncio.sleep(poll_interval)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    invalid = [url for url in args.urls if not validate_url(url)]
    if invalid:
        logger.error(f"Invalid URLs: {', '.join(invalid)}")
        return 2

    return asyncio.run(run(args.urls, args.output, args.poll_interval))


if __name__ == "__main__":
    sys.exit(main())
