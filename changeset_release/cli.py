"""CLI entry point for changeset-release.

In a workflow the action inputs arrive as INPUT_<NAME> environment variables,
so every option can be given either way.
"""

from __future__ import annotations

from pathlib import Path

import click

from .changesets import read_changeset_state
from .config import (
    DEFAULT_COMMIT_MESSAGE,
    DEFAULT_PR_BODY_MAX_CHARACTERS,
    DEFAULT_PR_TITLE,
    ActionConfig,
    GitHubContext,
)
from .errors import ActionError, CommandError
from .pipeline import run_action
from .shell import fatal


def _blank_to_none(
    ctx: click.Context, param: click.Parameter, value: str | None
) -> str | None:
    # Actions passes unset inputs as empty strings
    if value is None or not value.strip():
        return None
    return value.strip()


def _bool_input(
    ctx: click.Context, param: click.Parameter, value: str | bool | None
) -> bool:
    # Blank boolean inputs fall back to their default
    if value is None or (isinstance(value, str) and not value.strip()):
        return param.default
    if isinstance(value, bool):
        return value
    return click.BOOL.convert(value.strip(), param, ctx)


@click.group()
@click.version_option(package_name="changeset-release")
def cli() -> None:
    """Version and publish packages from changesets in GitHub Actions."""


@cli.command()
@click.option(
    "--cwd",
    envvar="INPUT_CWD",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Repository directory to operate on. (default: current directory)",
)
@click.option(
    "--setup-git-user",
    envvar="INPUT_SETUPGITUSER",
    type=str,
    callback=_bool_input,
    default=True,
    show_default=True,
    help="Commit as github-actions[bot].",
)
@click.option(
    "--tag",
    envvar="INPUT_TAG",
    callback=_blank_to_none,
    help="Release channel to publish under, e.g. latest or next.",
)
@click.option(
    "--prepare-script",
    envvar="INPUT_PREPARESCRIPT",
    callback=_blank_to_none,
    help="Command to run after versioning and before publishing.",
)
@click.option(
    "--title",
    envvar="INPUT_TITLE",
    default=DEFAULT_PR_TITLE,
    show_default=True,
    help="Title of the version PR.",
)
@click.option(
    "--commit",
    envvar="INPUT_COMMIT",
    default=DEFAULT_COMMIT_MESSAGE,
    show_default=True,
    help="Message of the version commit.",
)
@click.option(
    "--create-github-releases",
    envvar="INPUT_CREATEGITHUBRELEASES",
    type=str,
    callback=_bool_input,
    default=True,
    show_default=True,
    help="Create a GitHub release for each published package.",
)
@click.option(
    "--pr-body-max-characters",
    type=int,
    default=DEFAULT_PR_BODY_MAX_CHARACTERS,
    show_default=True,
    help="Truncate the version PR body beyond this length.",
)
@click.option("--github-token", envvar="GITHUB_TOKEN", callback=_blank_to_none)
@click.option("--npm-token", envvar="NPM_TOKEN", callback=_blank_to_none)
@click.option(
    "--github-output",
    envvar="GITHUB_OUTPUT",
    callback=_blank_to_none,
    help="File to append step outputs to.",
)
def run(
    cwd: Path | None,
    setup_git_user: bool,
    tag: str | None,
    prepare_script: str | None,
    title: str,
    commit: str,
    create_github_releases: bool,
    pr_body_max_characters: int,
    github_token: str | None,
    npm_token: str | None,
    github_output: str | None,
) -> None:
    """Run the release (usually called from CI)."""
    config = ActionConfig(
        github_token=github_token,
        npm_token=npm_token,
        cwd=(cwd or Path.cwd()).resolve(),
        setup_git_user=setup_git_user,
        tag=tag,
        prepare_script=prepare_script,
        pr_title=title,
        commit_message=commit,
        create_github_releases=create_github_releases,
        pr_body_max_characters=pr_body_max_characters,
    )
    try:
        run_action(config, GitHubContext.from_env(), github_output=github_output)
    except CommandError as exc:
        if exc.diagnostics():
            print(exc.diagnostics())
        fatal(str(exc))
    except ActionError as exc:
        fatal(str(exc))


@cli.command()
@click.option(
    "--cwd",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    show_default=True,
)
def status(cwd: Path) -> None:
    """Show the changesets waiting to be released."""
    try:
        state = read_changeset_state(cwd)
    except ActionError as exc:
        raise click.ClickException(str(exc)) from exc

    if state.pre_state is not None:
        click.echo(f"Pre mode: {state.pre_state.mode} ({state.pre_state.tag})")

    if not state.has_changesets:
        click.echo("No changesets found")
        return

    for changeset in state.changesets:
        click.echo(f"{changeset.id}")
        for release in changeset.releases:
            click.echo(f"  {release.name}: {release.type}")
