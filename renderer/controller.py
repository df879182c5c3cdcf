"""Job controller: drives a render session across a job's URLs and tracks status."""
import asyncio
import logging
import os
from typing import Any, Awaitable, Callable, Dict, List, Optional

from renderer.session import RenderError, RenderOutcome, RenderSession
from shared.config import Settings, settings as default_settings
from shared.utils import generate_job_id, resolve_output_dir, unique_pdf_path
from storage.job_store import JobStatus, JobStore, UrlStatus, new_job_record

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Awaitable[RenderSession]]
UpdateCallback = Callable[[Dict[str, Any]], Awaitable[None]]


class JobController:
    """
    Owns the lifecycle of PDF conversion jobs.

    Each submitted job runs as its own asyncio task. The controller is the
    only writer of job records; every write re-reads the record under a lock
    and is dropped once the job is terminal, so the first terminal write
    (completed, failed or cancelled) is final.
    """

    def __init__(
        self,
        store: JobStore,
        session_factory: Optional[SessionFactory] = None,
        settings: Settings = None,
        on_update: Optional[UpdateCallback] = None
    ):
        self.store = store
        self.settings = settings or default_settings
        self.session_factory = session_factory or self._launch_session
        self.on_update = on_update
        self._sessions: Dict[str, Any] = {}
        self._tasks: Dict[str, asyncio.Task] = {}
        self._lock = asyncio.Lock()

    async def _launch_session(self) -> RenderSession:
        return await RenderSession.launch(self.settings)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def submit(self, urls: List[str], output_path: str) -> str:
        """Create a job and start processing it in the background."""
        job_id = generate_job_id()
        await self.store.create(new_job_record(job_id, urls, output_path))

        task = asyncio.create_task(self._process_job(job_id))
        self._tasks[job_id] = task
        task.add_done_callback(lambda _: self._tasks.pop(job_id, None))

        logger.info(f"Job {job_id} submitted with {len(urls)} URLs")
        return job_id

    async def get_status(self, job_id: str) -> Optional[Dict[str, Any]]:
        """Get the current job record."""
        return await self.store.get(job_id)

    async def cancel(self, job_id: str) -> bool:
        """
        Cancel an active job.

        Returns False for unknown or already finished jobs. Otherwise marks the
        job cancelled and force-closes its browser, which aborts the URL in
        flight.
        """
        async with self._lock:
            job = await self.store.get(job_id)
            if not job or job["completed"]:
                return False

            updated = await self.store.update(job_id, {
                "status": JobStatus.CANCELLED,
                "completed": True
            })
            session = self._sessions.pop(job_id, None)

        logger.info(f"Job {job_id} cancelled")
        await self._notify(updated)

        if session is not None:
            logger.info(f"Closing browser for cancelled job {job_id}")
            await session.close()

        return True

    async def wait_for_job(
        self,
        job_id: str,
        poll_interval: Optional[float] = None,
        timeout: Optional[float] = None
    ) -> Optional[Dict[str, Any]]:
        """Poll a job until it is finished and return the final record."""
        interval = self.settings.status_poll_interval if poll_interval is None else poll_interval

        async def _poll():
            while True:
                job = await self.store.get(job_id)
                if job is None or job["completed"]:
                    return job
                await asyncio.sleep(interval)

        return await asyncio.wait_for(_poll(), timeout=timeout)

    async def join(self, job_id: str):
        """Wait for a job's processing task to exit."""
        task = self._tasks.get(job_id)
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    def active_jobs(self) -> List[str]:
        """IDs of jobs whose processing task is still running."""
        return [job_id for job_id, task in self._tasks.items() if not task.done()]

    async def shutdown(self):
        """Cancel all running jobs and wait for their tasks to finish."""
        job_ids = self.active_jobs()
        for job_id in job_ids:
            await self.cancel(job_id)
        tasks = [self._tasks[job_id] for job_id in job_ids if job_id in self._tasks]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # ------------------------------------------------------------------
    # Processing routine
    # ------------------------------------------------------------------

    async def _process_job(self, job_id: str):
        job = await self.store.get(job_id)
        if job is None:
            return

        session = None
        try:
            try:
                output_dir = await self._prepare_output_dir(job["output_path"])
            except OSError as e:
                logger.error(f"Job {job_id}: failed to create output directory: {e}")
                await self._fail(job_id, f"Failed to create output directory: {e}")
                return

            started = await self._write(job_id, lambda _: {
                "status": JobStatus.PROCESSING,
                "output_path": output_dir
            })
            if not started:
                return

            logger.info(
                f"Starting PDF generation for job {job_id} with {len(job['urls'])} URLs "
                f"into {output_dir}"
            )

            session = await self.session_factory()
            if not await self._register_session(job_id, session):
                return

            outcomes = await self._render_all(job_id, job["urls"], session, output_dir)

            await self._release_session(job_id, session)
            session = None

            success_count = sum(1 for outcome in outcomes if outcome.success)
            fail_count = len(outcomes) - success_count
            finished = await self._write(job_id, lambda _: {
                "status": JobStatus.COMPLETED,
                "completed": True,
                "success_count": success_count,
                "fail_count": fail_count
            })
            if finished:
                logger.info(
                    f"PDF generation complete for job {job_id}. "
                    f"Success: {success_count}, Failed: {fail_count}"
                )
        except Exception as e:
            logger.exception(f"Error in PDF generation for job {job_id}")
            await self._fail(job_id, str(e) or e.__class__.__name__)
        finally:
            if session is not None:
                await self._release_session(job_id, session)

    async def _render_all(
        self,
        job_id: str,
        urls: List[str],
        session: RenderSession,
        output_dir: str
    ) -> List[RenderOutcome]:
        """Render URLs one at a time; stops early if the job is no longer active."""
        outcomes: List[RenderOutcome] = []

        for index, url in enumerate(urls):
            if not await self._set_url_status(job_id, index, UrlStatus.PROCESSING):
                break

            logger.info(f"Job {job_id}: processing URL ({index + 1}/{len(urls)}): {url}")
            outcome = await self._render_url(session, url, output_dir)
            outcomes.append(outcome)

            if outcome.success:
                logger.info(f"Job {job_id}: PDF saved: {outcome.file_path}")
            else:
                logger.error(f"Job {job_id}: error processing URL {url}: {outcome.error}")

            if not await self._record_outcome(job_id, index, outcome):
                break

        return outcomes

    async def _render_url(
        self,
        session: RenderSession,
        url: str,
        output_dir: str
    ) -> RenderOutcome:
        """Render one URL to a PDF file. Never raises; failures become outcomes."""
        try:
            async with session.open_page() as page:
                await session.navigate(page, url)
                await asyncio.sleep(self.settings.settle_delay)

                await session.auto_scroll(page)
                await asyncio.sleep(self.settings.post_scroll_delay)

                file_path = unique_pdf_path(output_dir, url)
                await session.capture(page, file_path)

                if not os.path.exists(file_path):
                    raise RenderError("PDF file was not created")

            return RenderOutcome(url=url, success=True, file_path=file_path)
        except Exception as e:
            return RenderOutcome(url=url, success=False, error=str(e) or e.__class__.__name__)

    async def _prepare_output_dir(self, output_path: str) -> str:
        output_dir = resolve_output_dir(
            output_path,
            self.settings.default_output_dir,
            self.settings.unusable_output_paths
        )
        if output_dir != output_path:
            logger.info(f"Using default output path: {output_dir}")

        await asyncio.to_thread(os.makedirs, output_dir, exist_ok=True)
        return output_dir

    # ------------------------------------------------------------------
    # Session registry
    # ------------------------------------------------------------------

    async def _register_session(self, job_id: str, session: RenderSession) -> bool:
        """Register the job's session so cancel() can find it. False if already cancelled."""
        async with self._lock:
            job = await self.store.get(job_id)
            if job is None or job["completed"]:
                return False
            self._sessions[job_id] = session
            return True

    async def _release_session(self, job_id: str, session: RenderSession):
        async with self._lock:
            if self._sessions.get(job_id) is session:
                del self._sessions[job_id]
        await session.close()

    # ------------------------------------------------------------------
    # Status writes
    # ------------------------------------------------------------------

    async def _write(
        self,
        job_id: str,
        build_fields: Callable[[Dict[str, Any]], Dict[str, Any]]
    ) -> bool:
        """
        Apply a write to an active job.

        build_fields receives the current record and returns the fields to
        merge. Returns False, writing nothing, if the job is gone or terminal.
        """
        async with self._lock:
            job = await self.store.get(job_id)
            if job is None or job["completed"]:
                return False
            updated = await self.store.update(job_id, build_fields(job))

        await self._notify(updated)
        return True

    async def _set_url_status(
        self,
        job_id: str,
        index: int,
        status: str,
        error: Optional[str] = None
    ) -> bool:
        def build(job):
            url_statuses = job["url_statuses"]
            url_statuses[index] = {**url_statuses[index], "status": status, "error": error}
            return {"url_statuses": url_statuses}

        return await self._write(job_id, build)

    async def _record_outcome(self, job_id: str, index: int, outcome: RenderOutcome) -> bool:
        def build(job):
            url_statuses = job["url_statuses"]
            if outcome.success:
                url_statuses[index] = {**url_statuses[index], "status": UrlStatus.COMPLETE, "error": None}
                return {"url_statuses": url_statuses, "success_count": job["success_count"] + 1}
            url_statuses[index] = {**url_statuses[index], "status": UrlStatus.FAILED, "error": outcome.error}
            return {"url_statuses": url_statuses, "fail_count": job["fail_count"] + 1}

        return await self._write(job_id, build)

    async def _fail(self, job_id: str, error: str) -> bool:
        return await self._write(job_id, lambda _: {
            "status": JobStatus.FAILED,
            "completed": True,
            "error": error
        })

    async def _notify(self, job: Optional[Dict[str, Any]]):
        if job is None or self.on_update is None:
            return
        try:
            await self.on_update(job)
        except Exception as e:
            logger.warning(f"Job update listener failed for {job['job_id']}: {e}")
