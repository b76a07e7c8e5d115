# fix.py
from __future__ import annotations

from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, List

import yaml

from .eligibility import SOURCE_RUNNER, TARGET_RUNNER
from .errors import ScanError
from .loader import compose_jobs, mapping_get
from .scan import Candidate


def _source_label_nodes(runs_on: yaml.Node | None) -> List[yaml.ScalarNode]:
    if isinstance(runs_on, yaml.ScalarNode):
        items = [runs_on]
    elif isinstance(runs_on, yaml.SequenceNode):
        items = [n for n in runs_on.value if isinstance(n, yaml.ScalarNode)]
    else:
        items = []
    return [n for n in items if n.value == SOURCE_RUNNER]


def rewrite_runs_on(text: str, job_ids: Iterable[str]) -> tuple[str, int]:
    """
    Replace ubuntu-latest with ubuntu-slim in the `runs-on` of the given jobs.

    Only the label text itself is touched, so comments, quoting and layout
    survive. Returns (new text, number of jobs updated).
    """
    try:
        jobs = compose_jobs(text)
    except yaml.YAMLError as e:
        raise ScanError(kind="invalid_yaml", message="Could not parse workflow file", details={"error": str(e)})

    nodes: List[yaml.ScalarNode] = []
    updated = 0
    for job_id in dict.fromkeys(job_ids):
        if job_id not in jobs:
            continue
        _key, body = jobs[job_id]
        job_nodes = _source_label_nodes(mapping_get(body, "runs-on"))
        if job_nodes:
            nodes.extend(job_nodes)
            updated += 1

    # right to left so earlier offsets stay valid
    for node in sorted(nodes, key=lambda n: n.start_mark.index, reverse=True):
        start, end = node.start_mark.index, node.end_mark.index
        span = text[start:end].replace(SOURCE_RUNNER, TARGET_RUNNER, 1)
        text = text[:start] + span + text[end:]

    return text, updated


def fix_workflow(path: str | Path, job_ids: Iterable[str]) -> int:
    """Rewrite one workflow file in place. Returns the number of jobs updated."""
    wf_path = Path(path)
    # newline="" keeps CRLF files as they are
    with open(wf_path, encoding="utf-8", newline="") as f:
        text = f.read()

    try:
        new_text, count = rewrite_runs_on(text, job_ids)
    except ScanError as e:
        e.path = str(wf_path)
        raise

    if count:
        with open(wf_path, "w", encoding="utf-8", newline="") as f:
            f.write(new_text)
    return count


def fix_candidates(candidates: Iterable[Candidate], *, include_missing: bool = False) -> Dict[str, int]:
    """
    Apply the runner change for all candidates, grouped by file.

    Candidates that use commands missing on ubuntu-slim are left alone
    unless `include_missing` is set. Returns jobs updated per file.
    """
    by_file: Dict[str, List[str]] = defaultdict(list)
    for c in candidates:
        if c.missing_commands and not include_missing:
            continue
        if c.job_id not in by_file[c.workflow_path]:
            by_file[c.workflow_path].append(c.job_id)

    return {path: fix_workflow(path, job_ids) for path, job_ids in by_file.items()}
