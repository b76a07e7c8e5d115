# commands.py
"""
Best-effort extraction of command names from `run` scripts.

This is not a shell parser. Each line is split on control and redirection
operators, leading `NAME=value` assignments and wrapper commands are dropped,
and the first remaining word is taken as the command. Quoting, escaping,
heredoc bodies and subshells are not understood, so unusual scripts simply
yield fewer (or odd) command names. Assignments are only dropped before the
wrappers, so `env NAME=value cmd` yields `NAME=value`. Nothing here raises.
"""

from __future__ import annotations

import re
from collections.abc import Container
from typing import List

from .eligibility import is_source_runner
from .model import Job


# Commands that run another command: `sudo docker ...`, `nohup ./serve`, ...
WRAPPER_PREFIXES: tuple[str, ...] = ("sudo", "env", "time", "nohup", "setsid", "stdbuf")

# Two-character operators first so `&&` is not read as two `&`.
SEPARATORS: tuple[str, ...] = ("&&", "||", ">>", "<<", "|", ";", ">", "<")

_SEPARATOR_RE = re.compile("|".join(re.escape(s) for s in SEPARATORS))


def split_command_line(line: str) -> List[str]:
    """Split one script line into candidate command fragments."""
    parts = (part.strip() for part in _SEPARATOR_RE.split(line))
    return [part for part in parts if part]


def command_from_fragment(fragment: str) -> str:
    """Return the command word of a fragment, or "" if there is none."""
    fields = fragment.split()

    # FOO=bar BAZ=qux make -> make
    start = 0
    while start < len(fields) and "=" in fields[start]:
        start += 1
    fields = fields[start:]

    # sudo env time make -> make
    while fields and fields[0] in WRAPPER_PREFIXES:
        fields = fields[1:]

    if not fields:
        return ""
    return fields[0]


def normalize_command(cmd: str) -> str:
    """Reduce a command to its basename: /usr/bin/docker -> docker."""
    return cmd.rsplit("/", 1)[-1].strip()


def extract_commands(script: str) -> List[str]:
    """Return command words from a (possibly multi-line) script, in order."""
    commands: List[str] = []
    for line in script.splitlines():
        line = line.strip()
        # also covers the `#!/bin/bash` shebang
        if not line or line.startswith("#"):
            continue
        for fragment in split_command_line(line):
            cmd = command_from_fragment(fragment)
            if cmd:
                commands.append(cmd)
    return commands


def job_commands(job: Job) -> set[str]:
    """Distinct command basenames invoked across all `run` steps of a job."""
    names: set[str] = set()
    for step in job.steps:
        if not step.run:
            continue
        for cmd in extract_commands(step.run):
            name = normalize_command(cmd)
            if name:
                names.add(name)
    return names


def extract_missing_commands(job: Job, table: Container[str]) -> set[str]:
    """
    Commands used by the job that are listed in `table` as unavailable on
    the slim runner. Only jobs on the source runner are inspected.
    """
    if not is_source_runner(job):
        return set()
    return {name for name in job_commands(job) if name in table}
