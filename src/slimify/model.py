# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Union


@dataclass(frozen=True)
class Step:
    """A single step inside a workflow job: either a `run` script or a `uses` action."""
    name: str = ""
    run: str = ""
    uses: str = ""


# ---------------------------------------------------------------------
# runs-on: scalar or sequence
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class Single:
    """`runs-on: ubuntu-latest`"""
    label: str


@dataclass(frozen=True)
class Matrix:
    """`runs-on: [ubuntu-latest, ...]`"""
    labels: tuple[str, ...]


RunnerSpec = Union[Single, Matrix]


def parse_runner_spec(raw: Any) -> Optional[RunnerSpec]:
    """
    Normalize a raw `runs-on` value.

    Strings become Single, lists/tuples become Matrix (non-string items are
    dropped). Anything else (None, mappings, numbers) is treated as absent.
    """
    if isinstance(raw, (Single, Matrix)):
        return raw
    if isinstance(raw, str):
        return Single(raw)
    if isinstance(raw, (list, tuple)):
        return Matrix(tuple(item for item in raw if isinstance(item, str)))
    return None


@dataclass
class Job:
    """
    A workflow job as seen by the eligibility engine.

    `id` is the key under `jobs:`; `line` is where that key sits in the file.
    `services` and `container` are kept opaque, only their presence matters.
    """
    id: str
    steps: list[Step] = field(default_factory=list)
    runs_on: Optional[RunnerSpec] = None
    services: Any = None
    container: Any = None
    name: str | None = None
    line: int = 0

    def __post_init__(self) -> None:
        self.runs_on = parse_runner_spec(self.runs_on)

    @property
    def display_name(self) -> str:
        return self.name or self.id


@dataclass
class Workflow:
    """A decoded workflow file."""
    path: Path
    jobs: List[Job] = field(default_factory=list)


# ---------------------------------------------------------------------
# Structural views
# ---------------------------------------------------------------------

def runner_labels(job: Job) -> set[str]:
    # runs_on may have been reassigned with a raw value after construction
    runs_on = parse_runner_spec(job.runs_on)
    if isinstance(runs_on, Single):
        return {runs_on.label}
    if isinstance(runs_on, Matrix):
        return set(runs_on.labels)
    return set()


def has_services(job: Job) -> bool:
    services = job.services
    if services is None:
        return False
    if isinstance(services, (dict, list, tuple, str)):
        return len(services) > 0
    return True


def has_container_declaration(job: Job) -> bool:
    # `container: node:18` and `container: {image: node:18}` both count
    return job.container is not None
