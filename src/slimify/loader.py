# loader.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from . import settings
from .errors import ScanError
from .model import Job, Step, Workflow


WORKFLOW_SUFFIXES = (".yml", ".yaml")


# ----------------------------------------------------------------------
# Discovery
# ----------------------------------------------------------------------

def find_workflow_files(root: str | Path = ".") -> List[Path]:
    """
    Return all workflow files under <root>/.github/workflows, sorted.

    Raises:
        ScanError: if the workflow directory does not exist
    """
    workflow_dir = Path(root) / settings.WORKFLOW_DIR
    if not workflow_dir.is_dir():
        raise ScanError(
            kind="workflow_dir_missing",
            message="Workflow directory not found",
            path=str(workflow_dir),
        )
    return sorted(p for p in workflow_dir.iterdir() if p.is_file() and p.suffix in WORKFLOW_SUFFIXES)


# ----------------------------------------------------------------------
# YAML nodes (line numbers + spans)
# ----------------------------------------------------------------------

def mapping_get(node: Any, key: str) -> Optional[yaml.Node]:
    """Value node for `key` in a YAML mapping node, or None."""
    if not isinstance(node, yaml.MappingNode):
        return None
    for key_node, value_node in node.value:
        if isinstance(key_node, yaml.ScalarNode) and key_node.value == key:
            return value_node
    return None


def compose_jobs(text: str) -> Dict[str, Tuple[yaml.Node, yaml.Node]]:
    """Map job id -> (key node, body node) for the `jobs:` section of a workflow."""
    root = yaml.compose(text, Loader=yaml.SafeLoader)
    jobs_node = mapping_get(root, "jobs")
    if not isinstance(jobs_node, yaml.MappingNode):
        return {}
    return {
        key_node.value: (key_node, value_node)
        for key_node, value_node in jobs_node.value
        if isinstance(key_node, yaml.ScalarNode)
    }


# ----------------------------------------------------------------------
# Decoding
# ----------------------------------------------------------------------

def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _parse_steps(raw: Any) -> List[Step]:
    if not isinstance(raw, list):
        return []
    steps: List[Step] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        steps.append(Step(
            name=_as_text(item.get("name")),
            run=_as_text(item.get("run")),
            uses=_as_text(item.get("uses")),
        ))
    return steps


def parse_workflow(text: str, path: str | Path = "<string>") -> Workflow:
    """Decode workflow YAML text into a Workflow; jobs keep their source line."""
    wf_path = Path(path)
    try:
        data = yaml.safe_load(text)
        nodes = compose_jobs(text)
    except yaml.YAMLError as e:
        raise ScanError(
            kind="invalid_yaml",
            message="Could not parse workflow file",
            path=str(wf_path),
            details={"error": str(e)},
        )

    workflow = Workflow(path=wf_path)
    if not isinstance(data, dict):
        return workflow
    jobs = data.get("jobs")
    if not isinstance(jobs, dict):
        return workflow

    for job_id, body in jobs.items():
        if not isinstance(body, dict):
            continue
        job_id = str(job_id)
        key_node = nodes.get(job_id, (None, None))[0]
        name = body.get("name")
        workflow.jobs.append(Job(
            id=job_id,
            name=name if isinstance(name, str) else None,
            line=key_node.start_mark.line + 1 if key_node is not None else 0,
            runs_on=body.get("runs-on"),
            steps=_parse_steps(body.get("steps")),
            services=body.get("services"),
            container=body.get("container"),
        ))
    return workflow


def load_workflow(path: str | Path) -> Workflow:
    """Read and decode one workflow file."""
    wf_path = Path(path)
    try:
        text = wf_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ScanError(
            kind="unreadable_workflow",
            message="Could not read workflow file",
            path=str(wf_path),
            details={"error": str(e)},
        )
    return parse_workflow(text, wf_path)
