"""Job queue integration (arq on Redis)."""

from photoindex.queue.jobs import JobPolicy, JobQueue, import_job_id

__all__ = ["JobPolicy", "JobQueue", "import_job_id"]
