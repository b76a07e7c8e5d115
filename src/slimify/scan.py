# scan.py
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Container, Dict, Iterable, List, Optional

from . import settings
from .commands import extract_missing_commands
from .compat import DEFAULT_MISSING_COMMANDS
from .eligibility import Classification, Reason, evaluate
from .github import APIError, GitHubClient, lookup_duration
from .loader import find_workflow_files, load_workflow
from .model import Workflow


@dataclass(frozen=True)
class Candidate:
    """A job that can move to ubuntu-slim."""
    workflow_path: str
    job_id: str
    job_name: str
    line: int
    duration: Optional[timedelta] = None
    missing_commands: tuple[str, ...] = ()


@dataclass(frozen=True)
class IneligibleJob:
    workflow_path: str
    job_id: str
    job_name: str
    line: int
    reasons: tuple[Reason, ...]
    duration: Optional[timedelta] = None


@dataclass(frozen=True)
class AlreadySlimJob:
    workflow_path: str
    job_id: str
    job_name: str
    line: int


@dataclass
class ScanResult:
    candidates: List[Candidate] = field(default_factory=list)
    ineligible_jobs: List[IneligibleJob] = field(default_factory=list)
    already_slim_jobs: List[AlreadySlimJob] = field(default_factory=list)
    # non-fatal problems, e.g. durations that could not be fetched
    warnings: List[str] = field(default_factory=list)


# ----------------------------------------------------------------------
# Durations
# ----------------------------------------------------------------------

def fetch_durations(
    client: GitHubClient,
    workflows: Iterable[Workflow],
    max_workers: int | None = None,
) -> tuple[Dict[Path, Dict[str, timedelta]], List[str]]:
    """
    Fetch last-run job durations for every workflow file in parallel.

    Returns (durations keyed by workflow path, warnings). A workflow whose
    durations cannot be fetched gets no entry and one warning.
    """
    workflows = [wf for wf in workflows if wf.jobs]
    durations: Dict[Path, Dict[str, timedelta]] = {}
    warnings: List[str] = []
    if not workflows:
        return durations, warnings

    with ThreadPoolExecutor(max_workers=max_workers or settings.MAX_WORKERS) as pool:
        futures = {pool.submit(client.job_durations, wf.path.name): wf for wf in workflows}
        for future in as_completed(futures):
            wf = futures[future]
            try:
                durations[wf.path] = future.result()
            except APIError as e:
                warnings.append(f"{wf.path}: could not fetch durations ({e})")

    return durations, warnings


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------

def classify_workflow(
    workflow: Workflow,
    result: ScanResult,
    durations: Optional[Dict[str, timedelta]] = None,
    table: Container[str] = DEFAULT_MISSING_COMMANDS,
) -> None:
    """Evaluate every job of one workflow and append it to `result`."""
    path = str(workflow.path)
    for job in workflow.jobs:
        duration = lookup_duration(durations, job) if durations is not None else None
        verdict = evaluate(job, duration)

        if verdict.classification is Classification.ALREADY_MIGRATED:
            result.already_slim_jobs.append(AlreadySlimJob(path, job.id, job.display_name, job.line))
        elif verdict.classification is Classification.INELIGIBLE:
            reasons = tuple(r for r in Reason if r in verdict.reasons)
            result.ineligible_jobs.append(
                IneligibleJob(path, job.id, job.display_name, job.line, reasons, duration)
            )
        else:
            missing = tuple(sorted(extract_missing_commands(job, table)))
            result.candidates.append(
                Candidate(path, job.id, job.display_name, job.line, duration, missing)
            )


def scan(
    root: str | Path = ".",
    *,
    skip_duration: bool = False,
    client: Optional[GitHubClient] = None,
    table: Container[str] = DEFAULT_MISSING_COMMANDS,
    files: Optional[List[str | Path]] = None,
    max_workers: int | None = None,
) -> ScanResult:
    """
    Scan workflow files and classify every job.

    Args:
        root: Repository root containing .github/workflows
        skip_duration: Do not query GitHub for last-run durations
        client: GitHub client used for durations; without one, durations are skipped
        table: Commands known to be missing on ubuntu-slim
        files: Explicit workflow files to scan instead of discovering them
        max_workers: Parallel duration fetches

    Raises:
        ScanError: workflow directory missing, unreadable or invalid YAML
    """
    paths = list(dict.fromkeys(Path(f) for f in files)) if files else find_workflow_files(root)
    workflows = [load_workflow(p) for p in paths]

    result = ScanResult()
    durations: Dict[Path, Dict[str, timedelta]] = {}
    fetched = not skip_duration and client is not None
    if fetched:
        durations, warnings = fetch_durations(client, workflows, max_workers=max_workers)
        result.warnings.extend(warnings)

    for wf in workflows:
        classify_workflow(
            wf,
            result,
            durations=durations.get(wf.path) if fetched else None,
            table=table,
        )
    return result
