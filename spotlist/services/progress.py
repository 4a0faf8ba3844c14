from __future__ import annotations

import threading
from dataclasses import asdict, dataclass
from typing import Callable, Dict, Optional

RUNNING = "running"
COMPLETED = "completed"
ERROR = "error"


@dataclass
class JobStatus:
    processed: int = 0
    total: int = 0
    status: str = RUNNING


class JobProgress:
    """Per-job count of resolved top-level playlist entries."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._jobs: Dict[str, JobStatus] = {}

    def start(self, job_id: str, total: int = 0) -> None:
        with self._lock:
            self._jobs[job_id] = JobStatus(total=total)

    def update(self, job_id: str, processed: int) -> None:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is not None:
                job.processed = processed

    def finish(self, job_id: str) -> None:
        self._set_status(job_id, COMPLETED)

    def error(self, job_id: str) -> None:
        self._set_status(job_id, ERROR)

    def _set_status(self, job_id: str, status: str) -> None:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is not None:
                job.status = status

    def callback(self, job_id: str) -> Callable[[int], None]:
        return lambda processed: self.update(job_id, processed)

    def pop(self, job_id: str) -> Optional[Dict[str, object]]:
        with self._lock:
            job = self._jobs.pop(job_id, None)
            return asdict(job) if job is not None else None

    def snapshot(self, job_id: str) -> Optional[Dict[str, object]]:
        with self._lock:
            job = self._jobs.get(job_id)
            return asdict(job) if job is not None else None


progress_tracker = JobProgress()

__all__ = ["JobProgress", "JobStatus", "progress_tracker"]
