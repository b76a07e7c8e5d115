# eligibility.py
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Optional

from .model import Job, has_container_declaration, has_services, runner_labels


SOURCE_RUNNER = "ubuntu-latest"
TARGET_RUNNER = "ubuntu-slim"

# ubuntu-slim jobs are capped at 15 minutes
MAX_DURATION = timedelta(minutes=15)


# ---------------------------------------------------------------------
# Detection tables
# ---------------------------------------------------------------------
# Matched against the lower-cased `run` script. New container tools
# (podman, nerdctl, ...) are added here, not in the checks below.

CONTAINER_COMMAND_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bdocker[\s-](?:build|run|exec|ps|pull|push|tag|login)\b"),
    re.compile(r"\bdocker-compose\b"),
    re.compile(r"\bdocker\s+compose\b"),
)

# Covers both `docker://alpine:latest` and `docker/build-push-action@v6`.
# Exact-case on purpose: action references are not normalized.
CONTAINER_ACTION_PREFIXES: tuple[str, ...] = ("docker",)


class Classification(str, Enum):
    ELIGIBLE = "eligible"
    INELIGIBLE = "ineligible"
    ALREADY_MIGRATED = "already-migrated"


class Reason(str, Enum):
    NOT_SOURCE_RUNNER = "not-source-runner"
    CONTAINER_COMMANDS = "container-commands"
    CONTAINER_ACTIONS = "container-actions"
    SERVICES = "services"
    CONTAINER = "container"
    DURATION = "duration"

    @property
    def description(self) -> str:
        return _REASON_DESCRIPTIONS[self]


_REASON_DESCRIPTIONS = {
    Reason.NOT_SOURCE_RUNNER: f"does not run on {SOURCE_RUNNER}",
    Reason.CONTAINER_COMMANDS: "uses Docker commands",
    Reason.CONTAINER_ACTIONS: "uses container-based actions",
    Reason.SERVICES: "uses service containers",
    Reason.CONTAINER: "runs inside a job container",
    Reason.DURATION: f"last run took {int(MAX_DURATION.total_seconds() // 60)} minutes or longer",
}


@dataclass(frozen=True)
class Verdict:
    classification: Classification
    reasons: frozenset[Reason] = frozenset()
    duration: Optional[timedelta] = None

    @property
    def eligible(self) -> bool:
        return self.classification is Classification.ELIGIBLE


# ---------------------------------------------------------------------
# Criteria
# ---------------------------------------------------------------------

def is_already_migrated(job: Job) -> bool:
    labels = runner_labels(job)
    return bool(labels) and labels == {TARGET_RUNNER}


def is_source_runner(job: Job) -> bool:
    return SOURCE_RUNNER in runner_labels(job)


def has_container_commands(job: Job) -> bool:
    """True if any `run` script invokes docker (build/run/exec/..., compose)."""
    for step in job.steps:
        if not step.run:
            continue
        script = step.run.lower()
        if any(pattern.search(script) for pattern in CONTAINER_COMMAND_PATTERNS):
            return True
    return False


def has_container_actions(job: Job) -> bool:
    """True if any `uses` reference starts with a container action prefix."""
    for step in job.steps:
        if not step.uses:
            continue
        if step.uses.startswith(CONTAINER_ACTION_PREFIXES):
            return True
    return False


def evaluate(job: Job, duration: Optional[timedelta] = None) -> Verdict:
    """
    Classify a job for migration to the slim runner.

    Jobs already on the target runner short-circuit to ALREADY_MIGRATED.
    Otherwise every criterion is checked and every violation is collected.
    `duration` is the job's last observed run time; when it is None the
    duration criterion is skipped.
    """
    if is_already_migrated(job):
        return Verdict(Classification.ALREADY_MIGRATED, duration=duration)

    reasons: set[Reason] = set()
    if not is_source_runner(job):
        reasons.add(Reason.NOT_SOURCE_RUNNER)
    if has_container_commands(job):
        reasons.add(Reason.CONTAINER_COMMANDS)
    if has_container_actions(job):
        reasons.add(Reason.CONTAINER_ACTIONS)
    if has_services(job):
        reasons.add(Reason.SERVICES)
    if has_container_declaration(job):
        reasons.add(Reason.CONTAINER)
    if duration is not None and duration >= MAX_DURATION:
        reasons.add(Reason.DURATION)

    classification = Classification.INELIGIBLE if reasons else Classification.ELIGIBLE
    return Verdict(classification, frozenset(reasons), duration)
