"""Console output formatting utilities for slimify."""

from __future__ import annotations

import os
import sys
from collections import defaultdict
from typing import Dict, List, Optional

from ..eligibility import TARGET_RUNNER
from ..github import format_duration
from ..scan import ScanResult


def format_local_link(file_path: str, line: int) -> str:
    """
    `/abs/path/to/file.yml:12`, which VS Code, iTerm2 and most terminals
    turn into a clickable link.
    """
    return f"{os.path.abspath(file_path)}:{line}"


def _group_by_file(items) -> Dict[str, List]:
    grouped: Dict[str, List] = defaultdict(list)
    for item in items:
        grouped[item.workflow_path].append(item)
    return grouped


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False, verbose: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
            verbose: If True, also list ineligible and already-migrated jobs
        """
        self.debug = debug
        self.verbose = verbose

    def print_header(self, title: str) -> None:
        """Print a section header."""
        print(f"\n{title}")
        print("-" * len(title))

    def print_candidates(self, result: ScanResult) -> None:
        """Print migration candidates grouped by workflow file."""
        if not result.candidates:
            print(f"No jobs found that can be safely migrated to {TARGET_RUNNER}.")
            return

        for path, jobs in _group_by_file(result.candidates).items():
            print(path)
            for job in jobs:
                print(
                    f'  - job "{job.job_name}" (L{job.line}) → {TARGET_RUNNER} compatible '
                    f"(last run: {format_duration(job.duration)}) {format_local_link(path, job.line)}"
                )
                if job.missing_commands:
                    print(f"    ⚠ uses commands missing on {TARGET_RUNNER}: {', '.join(job.missing_commands)}")
            print()

    def print_ineligible(self, result: ScanResult) -> None:
        if not result.ineligible_jobs:
            return
        self.print_header("Not eligible")
        for path, jobs in _group_by_file(result.ineligible_jobs).items():
            print(path)
            for job in jobs:
                reasons = "; ".join(r.description for r in job.reasons)
                print(f'  - job "{job.job_name}" (L{job.line}): {reasons} {format_local_link(path, job.line)}')
        print()

    def print_already_slim(self, result: ScanResult) -> None:
        if not result.already_slim_jobs:
            return
        self.print_header(f"Already on {TARGET_RUNNER}")
        for job in result.already_slim_jobs:
            print(f'  - job "{job.job_name}" {format_local_link(job.workflow_path, job.line)}')
        print()

    def print_results(self, result: ScanResult) -> None:
        """Print the full scan report."""
        self.print_candidates(result)
        if self.verbose:
            self.print_ineligible(result)
            self.print_already_slim(result)
        for warning in result.warnings:
            self.print_warning(warning)
        if result.candidates:
            print(f"Total: {len(result.candidates)} job(s) can be safely migrated.")

    def print_fix_results(self, fixed: Dict[str, int], skipped: int = 0) -> None:
        total = sum(fixed.values())
        for path, count in fixed.items():
            if count:
                print(f"  updated {path} ({count} job(s))")
        if skipped:
            print(f"Skipped {skipped} job(s) that use commands missing on {TARGET_RUNNER} (use --force to include them).")
        print(f"Updated {total} job(s) to {TARGET_RUNNER}.")

    def print_warning(self, message: str) -> None:
        print(f"WARNING: {message}", file=sys.stderr)

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exc()
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
