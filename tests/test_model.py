"""Tests for the workflow job model."""

import pytest

from slimify.model import (
    Job,
    Matrix,
    Single,
    Step,
    has_container_declaration,
    has_services,
    parse_runner_spec,
    runner_labels,
)


class TestRunnerSpec:
    def test_string_is_single(self):
        assert parse_runner_spec("ubuntu-latest") == Single("ubuntu-latest")

    def test_list_is_matrix(self):
        assert parse_runner_spec(["ubuntu-latest", "macos-latest"]) == Matrix(("ubuntu-latest", "macos-latest"))

    def test_matrix_drops_non_strings(self):
        assert parse_runner_spec(["ubuntu-latest", 3, None]) == Matrix(("ubuntu-latest",))

    @pytest.mark.parametrize("raw", [None, {"group": "large"}, 42])
    def test_other_shapes_are_absent(self, raw):
        assert parse_runner_spec(raw) is None

    def test_job_normalizes_raw_value(self):
        job = Job(id="build", runs_on=["ubuntu-latest"])
        assert job.runs_on == Matrix(("ubuntu-latest",))


class TestRunnerLabels:
    def test_single(self):
        assert runner_labels(Job(id="a", runs_on="ubuntu-latest")) == {"ubuntu-latest"}

    def test_matrix(self):
        job = Job(id="a", runs_on=["ubuntu-22.04", "macos-latest"])
        assert runner_labels(job) == {"ubuntu-22.04", "macos-latest"}

    def test_absent(self):
        assert runner_labels(Job(id="a")) == set()

    def test_mapping_form_is_absent(self):
        assert runner_labels(Job(id="a", runs_on={"labels": ["ubuntu-latest"]})) == set()

    @pytest.mark.parametrize("raw, expected", [
        ("ubuntu-latest", {"ubuntu-latest"}),
        (["ubuntu-latest", "macos-latest"], {"ubuntu-latest", "macos-latest"}),
        (None, set()),
    ])
    def test_raw_value_assigned_after_construction(self, raw, expected):
        job = Job(id="a", runs_on="ubuntu-22.04")
        job.runs_on = raw
        assert runner_labels(job) == expected


class TestServicesAndContainer:
    def test_services_mapping(self):
        job = Job(id="a", services={"postgres": {"image": "postgres:16"}})
        assert has_services(job) is True

    def test_no_services(self):
        assert has_services(Job(id="a")) is False

    def test_empty_services_mapping(self):
        assert has_services(Job(id="a", services={})) is False

    def test_container_string(self):
        assert has_container_declaration(Job(id="a", container="node:18")) is True

    def test_container_mapping(self):
        assert has_container_declaration(Job(id="a", container={"image": "node:18"})) is True

    def test_no_container(self):
        assert has_container_declaration(Job(id="a")) is False


class TestJob:
    def test_display_name_falls_back_to_id(self):
        assert Job(id="lint").display_name == "lint"
        assert Job(id="lint", name="Lint code").display_name == "Lint code"

    def test_step_defaults(self):
        step = Step(run="make")
        assert step.uses == ""
        assert step.name == ""
