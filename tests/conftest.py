"""
slimify test configuration

Shared fixtures for all tests.
"""
import pytest


@pytest.fixture
def workflow_dir(tmp_path, monkeypatch):
    """An empty .github/workflows directory; the test runs from its repo root."""
    wf_dir = tmp_path / ".github" / "workflows"
    wf_dir.mkdir(parents=True)
    monkeypatch.chdir(tmp_path)
    return wf_dir


@pytest.fixture
def write_workflow(workflow_dir):
    """Write a workflow file and return its path."""
    def _write(filename: str, content: str):
        path = workflow_dir / filename
        path.write_text(content, encoding="utf-8")
        return path
    return _write
