"""Integration tests for scanning a repository's workflows."""

from datetime import timedelta
from pathlib import Path
from unittest.mock import patch

import pytest

from slimify.errors import ScanError
from slimify.github import APIError, GitHubClient
from slimify.eligibility import Reason
from slimify.scan import scan


class FakeClient:
    """Stands in for GitHubClient; durations keyed by workflow file name."""

    def __init__(self, durations=None, fail=()):
        self.durations = durations or {}
        self.fail = set(fail)
        self.calls = []

    def job_durations(self, workflow_file):
        self.calls.append(workflow_file)
        if workflow_file in self.fail:
            raise APIError("API request failed: 403 Forbidden.")
        return self.durations.get(workflow_file, {})


CASES = [
    ("single eligible job", """name: test
on: push
jobs:
  test:
    runs-on: ubuntu-latest
    steps:
      - run: echo "hello"
""", ["test"]),
    ("docker command", """on: push
jobs:
  build:
    runs-on: ubuntu-latest
    steps:
      - run: docker build -t app .
""", []),
    ("docker action", """on: push
jobs:
  build:
    runs-on: ubuntu-latest
    steps:
      - uses: docker/build-push-action@v6
        with:
          context: .
          push: true
""", []),
    ("docker image action", """on: push
jobs:
  test:
    runs-on: ubuntu-latest
    steps:
      - uses: docker://alpine:latest
        with:
          args: echo "test"
""", []),
    ("job container", """on: push
jobs:
  test:
    runs-on: ubuntu-latest
    container:
      image: node:18
    steps:
      - run: node --version
""", []),
    ("mixed", """on: push
jobs:
  eligible:
    runs-on: ubuntu-latest
    steps:
      - run: echo "hello"
  not-eligible-docker:
    runs-on: ubuntu-latest
    steps:
      - run: docker build .
  not-eligible-runner:
    runs-on: ubuntu-22.04
    steps:
      - run: echo "hello"
  not-eligible-container:
    runs-on: ubuntu-latest
    container:
      image: node:18
    steps:
      - run: node --version
""", ["eligible"]),
    ("no jobs section", "name: no-jobs\non: push\n", []),
]


class TestScan:
    @pytest.mark.parametrize("name, content, expected", CASES, ids=[c[0] for c in CASES])
    def test_candidates(self, write_workflow, name, content, expected):
        write_workflow("test.yml", content)
        result = scan(skip_duration=True)
        assert [c.job_id for c in result.candidates] == expected

    def test_no_workflow_directory(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(ScanError):
            scan(skip_duration=True)

    def test_four_job_scenario(self, write_workflow):
        write_workflow("ci.yml", """on: push
jobs:
  checkout-only:
    runs-on: ubuntu-latest
    steps:
      - uses: actions/checkout@v4
  image:
    runs-on: ubuntu-latest
    steps:
      - run: docker build .
  integration:
    runs-on: ubuntu-latest
    services:
      redis:
        image: redis:7
    steps:
      - run: make integration
  slim:
    runs-on: ubuntu-slim
    steps:
      - run: echo "already slim"
""")
        result = scan(skip_duration=True)

        assert [c.job_id for c in result.candidates] == ["checkout-only"]
        assert {j.job_id: j.reasons for j in result.ineligible_jobs} == {
            "image": (Reason.CONTAINER_COMMANDS,),
            "integration": (Reason.SERVICES,),
        }
        assert [j.job_id for j in result.already_slim_jobs] == ["slim"]

    def test_candidate_details(self, write_workflow):
        path = write_workflow("deploy.yml", """on: push
jobs:
  deploy:
    name: Deploy
    runs-on: ubuntu-latest
    steps:
      - run: |
          sudo kubectl apply -f k8s/
          helm upgrade app ./chart
""")
        candidate = scan(skip_duration=True).candidates[0]
        assert candidate.job_name == "Deploy"
        assert candidate.line == 3
        assert Path(candidate.workflow_path).resolve() == path.resolve()
        assert candidate.missing_commands == ("helm", "kubectl")
        assert candidate.duration is None

    def test_custom_table(self, write_workflow):
        write_workflow("ci.yml", "jobs:\n  a:\n    runs-on: ubuntu-latest\n    steps:\n      - run: jq . data.json\n")
        result = scan(skip_duration=True, table=frozenset({"jq"}))
        assert result.candidates[0].missing_commands == ("jq",)

    def test_explicit_files(self, write_workflow):
        write_workflow("a.yml", "jobs:\n  a:\n    runs-on: ubuntu-latest\n")
        b = write_workflow("b.yml", "jobs:\n  b:\n    runs-on: ubuntu-latest\n")
        result = scan(skip_duration=True, files=[b])
        assert [c.job_id for c in result.candidates] == ["b"]

    def test_repeated_file_is_scanned_once(self, write_workflow):
        path = write_workflow("ci.yml", "jobs:\n  a:\n    runs-on: ubuntu-latest\n")
        result = scan(skip_duration=True, files=[path, str(path)])
        assert [c.job_id for c in result.candidates] == ["a"]


class TestScanDurations:
    WORKFLOW = """on: push
jobs:
  quick:
    runs-on: ubuntu-latest
    steps:
      - run: make
  slow:
    runs-on: ubuntu-latest
    steps:
      - run: make all
  new:
    runs-on: ubuntu-latest
    steps:
      - run: make
"""

    def test_durations_applied(self, write_workflow):
        write_workflow("ci.yml", self.WORKFLOW)
        client = FakeClient({"ci.yml": {"quick": timedelta(minutes=2), "slow": timedelta(minutes=20)}})
        result = scan(client=client)

        assert {c.job_id: c.duration for c in result.candidates} == {
            "quick": timedelta(minutes=2),
            "new": None,
        }
        assert result.ineligible_jobs[0].job_id == "slow"
        assert result.ineligible_jobs[0].reasons == (Reason.DURATION,)
        assert client.calls == ["ci.yml"]

    def test_skip_duration_does_not_call_client(self, write_workflow):
        write_workflow("ci.yml", self.WORKFLOW)
        client = FakeClient({"ci.yml": {"slow": timedelta(minutes=20)}})
        result = scan(skip_duration=True, client=client)
        assert len(result.candidates) == 3
        assert client.calls == []

    def test_fetch_failure_becomes_warning(self, write_workflow):
        write_workflow("ci.yml", self.WORKFLOW)
        result = scan(client=FakeClient(fail={"ci.yml"}))
        assert len(result.candidates) == 3
        assert len(result.warnings) == 1
        assert "403" in result.warnings[0]

    def test_api_timeout_becomes_warning(self, write_workflow):
        write_workflow("ci.yml", self.WORKFLOW)
        client = GitHubClient("octo/repo", base_url="https://api.example.test", token=None)
        with patch("urllib.request.urlopen", side_effect=TimeoutError("timed out")):
            result = scan(client=client)

        assert [c.job_id for c in result.candidates] == ["quick", "slow", "new"]
        assert all(c.duration is None for c in result.candidates)
        assert len(result.warnings) == 1
        assert "timed out" in result.warnings[0]
