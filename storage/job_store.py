"""In-memory job store for PDF conversion jobs."""
import copy
from typing import Optional, List, Dict, Any

from shared.utils import get_utc_now


class JobStatus:
    """Job status constants."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    TERMINAL = (COMPLETED, FAILED, CANCELLED)


class UrlStatus:
    """Per-URL status constants."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETE = "complete"
    FAILED = "failed"


def new_job_record(job_id: str, urls: List[str], output_path: str) -> Dict[str, Any]:
    """Build a fresh job record with every URL pending."""
    now = get_utc_now()
    return {
        "job_id": job_id,
        "urls": list(urls),
        "output_path": output_path,
        "status": JobStatus.PENDING,
        "completed": False,
        "url_statuses": [
            {"url": url, "status": UrlStatus.PENDING, "error": None}
            for url in urls
        ],
        "success_count": 0,
        "fail_count": 0,
        "error": None,
        "created_at": now,
        "updated_at": now,
        "revision": 0
    }


class JobStore:
    """
    Process-local store mapping job IDs to job records.

    Records handed out are deep copies, so a reader never observes a record
    while it is being changed and callers cannot mutate stored state by
    accident. Every accepted update bumps the record's ``revision``.
    """

    def __init__(self):
        self._jobs: Dict[str, Dict[str, Any]] = {}

    async def create(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a new job record."""
        job_id = record["job_id"]
        if job_id in self._jobs:
            raise ValueError(f"Job {job_id} already exists")
        self._jobs[job_id] = copy.deepcopy(record)
        return copy.deepcopy(record)

    async def get(self, job_id: str) -> Optional[Dict[str, Any]]:
        """Get a job by ID."""
        job = self._jobs.get(job_id)
        return copy.deepcopy(job) if job is not None else None

    async def update(self, job_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Merge the supplied fields into a job record and return the updated job."""
        job = self._jobs.get(job_id)
        if job is None:
            return None

        updated = {**job, **copy.deepcopy(fields)}
        updated["revision"] = job.get("revision", 0) + 1
        updated["updated_at"] = get_utc_now()
        self._jobs[job_id] = updated
        return copy.deepcopy(updated)

    async def delete(self, job_id: str) -> bool:
        """Delete a job record."""
        return self._jobs.pop(job_id, None) is not None

    async def list_jobs(
        self,
        status: Optional[str] = None,
        limit: int = 50,
        skip: int = 0
    ) -> List[Dict[str, Any]]:
        """List jobs with optional status filter, newest first."""
        jobs = [
            job for job in self._jobs.values()
            if status is None or job["status"] == status
        ]
        jobs.sort(key=lambda job: job["created_at"], reverse=True)
        return [copy.deepcopy(job) for job in jobs[skip:skip + limit]]
