# cli.py
from __future__ import annotations

import sys

import click

from .compat import DEFAULT_MISSING_COMMANDS, load_compatibility_table
from .eligibility import TARGET_RUNNER
from .errors import ScanError
from .fix import fix_candidates
from .git_facts.git import current_github_repo
from .github import GitHubClient
from .scan import ScanResult, scan
from .ui.console import Console, get_console, set_console


def _fail(exc: BaseException) -> None:
    console = get_console()
    if isinstance(exc, KeyboardInterrupt):
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    if isinstance(exc, ScanError):
        details = [f"{k}: {v}" for k, v in exc.details.items()]
        if exc.path:
            details.insert(0, exc.path)
        console.print_error(
            exc.kind.replace("_", " ").capitalize(),
            exc.message,
            details=details or None,
            suggestion="Run slimify from the repository root, or pass workflow files with --file."
            if exc.kind == "workflow_dir_missing" else None,
        )
    else:
        console.print_exception(exc)
    sys.exit(1)


def _run_scan(ctx: click.Context) -> ScanResult:
    console = get_console()
    opts = ctx.obj

    table = DEFAULT_MISSING_COMMANDS
    if opts["missing_commands"]:
        table = load_compatibility_table(opts["missing_commands"])
        console.print_debug(f"Loaded {len(table)} missing command(s) from {opts['missing_commands']}")

    client = None
    if not opts["skip_duration"]:
        repo = opts["repo"] or current_github_repo()
        if repo:
            console.print_debug(f"Fetching job durations for {repo}")
            client = GitHubClient(repo)
        else:
            console.print_warning("Could not determine the GitHub repository; job durations are skipped (use --repo).")

    return scan(
        ".",
        skip_duration=opts["skip_duration"],
        client=client,
        table=table,
        files=list(opts["files"]) or None,
    )


@click.group(invoke_without_command=True)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Also list ineligible and already-migrated jobs")
@click.option("--skip-duration", is_flag=True, default=False, help="Do not fetch last-run durations from GitHub")
@click.option(
    "--file",
    "-f",
    "files",
    multiple=True,
    type=click.Path(dir_okay=False),
    help="Workflow file to scan (repeatable; defaults to all files in .github/workflows)",
)
@click.option(
    "--missing-commands",
    default=None,
    type=click.Path(dir_okay=False),
    help=f"YAML list of commands missing on {TARGET_RUNNER} (overrides the built-in table)",
)
@click.option("--repo", default=None, help="GitHub repository as owner/name (defaults to the origin remote)")
@click.pass_context
def cli(ctx, debug, verbose, skip_duration, files, missing_commands, repo):
    """Find GitHub Actions jobs that can move from ubuntu-latest to ubuntu-slim."""
    set_console(Console(debug=debug, verbose=verbose))
    ctx.ensure_object(dict)
    ctx.obj.update(
        debug=debug,
        skip_duration=skip_duration,
        files=files,
        missing_commands=missing_commands,
        repo=repo,
    )
    if ctx.invoked_subcommand is None:
        try:
            result = _run_scan(ctx)
        except (Exception, KeyboardInterrupt) as e:
            _fail(e)
        get_console().print_results(result)


@cli.command()
@click.option("--force", is_flag=True, default=False, help=f"Also migrate jobs that use commands missing on {TARGET_RUNNER}")
@click.pass_context
def fix(ctx, force):
    """Replace runs-on: ubuntu-latest with ubuntu-slim for jobs that meet all criteria."""
    console = get_console()
    try:
        result = _run_scan(ctx)
        console.print_info(f"Updating workflows to use {TARGET_RUNNER}...")
        fixed = fix_candidates(result.candidates, include_missing=force)
    except (Exception, KeyboardInterrupt) as e:
        _fail(e)

    skipped = 0 if force else sum(1 for c in result.candidates if c.missing_commands)
    for warning in result.warnings:
        console.print_warning(warning)
    console.print_fix_results(fixed, skipped=skipped)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
