# github.py
from __future__ import annotations

import json
import re
import urllib.error
import urllib.request
from datetime import datetime, timedelta
from typing import Dict, List, Optional
from urllib.parse import quote, urlencode, urljoin

from pydantic import BaseModel, Field

from . import settings
from .model import Job


class APIError(Exception):
    """Raised when GitHub API requests fail."""
    pass


# -------------------- Schemas --------------------

class WorkflowRun(BaseModel):
    id: int
    name: Optional[str] = None
    status: Optional[str] = None
    conclusion: Optional[str] = None
    created_at: Optional[datetime] = None


class WorkflowRunsPage(BaseModel):
    total_count: int = 0
    workflow_runs: List[WorkflowRun] = Field(default_factory=list)


class RunJob(BaseModel):
    id: int
    name: str
    status: Optional[str] = None
    conclusion: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def duration(self) -> Optional[timedelta]:
        if self.started_at is None or self.completed_at is None:
            return None
        elapsed = self.completed_at - self.started_at
        return elapsed if elapsed >= timedelta(0) else None


class RunJobsPage(BaseModel):
    total_count: int = 0
    jobs: List[RunJob] = Field(default_factory=list)


# "build (ubuntu-latest, 3.12)" -> "build"
_MATRIX_SUFFIX = re.compile(r"\s+\(.*\)$")


class GitHubClient:
    """Read-only client for the GitHub Actions REST API."""

    def __init__(
        self,
        repo: str,
        base_url: str = settings.GITHUB_API_URL,
        token: Optional[str] = settings.GITHUB_TOKEN,
        timeout: float = settings.API_TIMEOUT,
    ):
        """
        Args:
            repo: "owner/name" of the repository
            base_url: API root (GitHub Enterprise uses https://host/api/v3)
            token: Optional bearer token; public repositories work without one
            timeout: Socket timeout per request, in seconds
        """
        self.repo = repo
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout

    def _request(self, path: str, params: Optional[dict] = None) -> dict:
        url = urljoin(self.base_url + "/", path.lstrip("/"))
        if params:
            url = f"{url}?{urlencode(params)}"

        req_headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.token:
            req_headers["Authorization"] = f"Bearer {self.token}"

        req = urllib.request.Request(url, headers=req_headers, method="GET")

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                response_data = response.read().decode("utf-8")
                if response_data:
                    return json.loads(response_data)
                return {}
        except urllib.error.HTTPError as e:
            error_body = e.read().decode("utf-8") if e.fp else ""
            raise APIError(f"API request failed: {e.code} {e.reason}. {error_body}".strip())
        except urllib.error.URLError as e:
            raise APIError(f"Network error: {e.reason}")
        except (TimeoutError, OSError) as e:
            # read timeouts surface from getresponse()/read(), not as URLError
            raise APIError(f"Network error: {e}")
        except json.JSONDecodeError as e:
            raise APIError(f"Invalid JSON response: {e}")

    def latest_run(self, workflow_file: str) -> Optional[WorkflowRun]:
        """Most recent completed run of a workflow file (e.g. "ci.yml"), if any."""
        data = self._request(
            f"/repos/{self.repo}/actions/workflows/{quote(workflow_file)}/runs",
            {"status": "completed", "per_page": 1},
        )
        page = WorkflowRunsPage.model_validate(data)
        return page.workflow_runs[0] if page.workflow_runs else None

    def run_jobs(self, run_id: int) -> List[RunJob]:
        data = self._request(
            f"/repos/{self.repo}/actions/runs/{run_id}/jobs",
            {"filter": "latest", "per_page": 100},
        )
        return RunJobsPage.model_validate(data).jobs

    def job_durations(self, workflow_file: str) -> Dict[str, timedelta]:
        """
        Durations of the jobs in the latest completed run, keyed by job name.

        Matrix expansions are folded onto their base name, keeping the
        longest duration.
        """
        run = self.latest_run(workflow_file)
        if run is None:
            return {}

        durations: Dict[str, timedelta] = {}
        for run_job in self.run_jobs(run.id):
            duration = run_job.duration
            if duration is None:
                continue
            for key in {run_job.name, _MATRIX_SUFFIX.sub("", run_job.name)}:
                if key not in durations or duration > durations[key]:
                    durations[key] = duration
        return durations


def lookup_duration(durations: Dict[str, timedelta], job: Job) -> Optional[timedelta]:
    """Find a job's duration by display name, falling back to its id."""
    if job.display_name in durations:
        return durations[job.display_name]
    return durations.get(job.id)


def format_duration(duration: Optional[timedelta]) -> str:
    """1m23s style, like Go's time.Duration; "unknown" when missing."""
    if duration is None:
        return "unknown"
    total = int(duration.total_seconds())
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{minutes}m{seconds}s"
    return f"{seconds}s"
