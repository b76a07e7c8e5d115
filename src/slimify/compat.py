# compat.py
from __future__ import annotations

from pathlib import Path
from typing import FrozenSet

import yaml

from .errors import ScanError


# Commands preinstalled on ubuntu-latest that the ubuntu-slim image does not ship.
DEFAULT_MISSING_COMMANDS: FrozenSet[str] = frozenset({
    # containers / orchestration
    "docker", "docker-compose", "podman", "buildah", "skopeo",
    "kubectl", "helm", "kind", "minikube", "kustomize",
    # cloud CLIs
    "az", "aws", "gcloud", "gsutil", "sam", "pulumi", "terraform", "packer",
    # language toolchains
    "java", "javac", "mvn", "gradle", "ant", "sbt", "kotlin",
    "go", "gofmt", "rustc", "cargo", "rustup",
    "dotnet", "php", "composer", "ruby", "gem", "bundle",
    "swift", "ghc", "cabal", "stack", "julia", "Rscript",
    "conda", "pwsh", "bazel", "bazelisk", "vcpkg",
    # databases
    "mysql", "psql", "mongosh", "sqlcmd",
    # browsers / drivers
    "google-chrome", "chromium", "chromedriver", "firefox", "geckodriver",
})


def load_compatibility_table(path: str | Path) -> FrozenSet[str]:
    """
    Load a missing-commands table from YAML.

    Accepts either a list of command names or a mapping of
    command -> bool (true meaning "missing on ubuntu-slim").
    """
    table_path = Path(path).expanduser()
    try:
        data = yaml.safe_load(table_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ScanError(
            kind="invalid_table",
            message="Compatibility table not found",
            path=str(table_path),
        )
    except yaml.YAMLError as e:
        raise ScanError(
            kind="invalid_table",
            message="Compatibility table is not valid YAML",
            path=str(table_path),
            details={"error": str(e)},
        )

    if isinstance(data, list):
        return frozenset(str(name) for name in data)
    if isinstance(data, dict):
        return frozenset(str(name) for name, missing in data.items() if missing)
    raise ScanError(
        kind="invalid_table",
        message="Compatibility table must be a list or a mapping of command -> bool",
        path=str(table_path),
    )
