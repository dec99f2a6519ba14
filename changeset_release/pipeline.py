"""Release run: credentials → changesets → version PR → prepare → publish.

This module orchestrates one changeset-release run:
1. Check that both tokens are present (nothing is written before this)
2. Configure the git identity and write the npm/git credential files
3. Read pending changesets; with none, report that and stop
4. Open or update the version PR
5. Run the user's prepare script, if any
6. Publish and create GitHub releases

Each step runs to completion before the next starts, and any failure ends
the run: CI re-runs the whole job rather than resuming it. The step outputs
(published, publishedPackages, hasChangesets) are written exactly once, as
soon as the changesets have been read, whichever way the run then ends.
"""

from __future__ import annotations

from pathlib import Path

from .changesets import read_changeset_state
from .config import ActionConfig, GitHubContext
from .credentials import configure_npmrc, setup_git_user, write_netrc
from .errors import CommandError, MissingInputError
from .models import ActionOutputs
from .publish import run_publish
from .shell import exec_with_output, step
from .version import run_version


def write_outputs(outputs: ActionOutputs, github_output: str | None) -> None:
    """Append step outputs to the $GITHUB_OUTPUT file.

    Outside of Actions (no output file) they are only printed.
    """
    values = outputs.as_step_outputs()
    for name, value in values.items():
        print(f"  {name}={value}")
    if not github_output:
        return
    with open(github_output, "a") as fh:
        for name, value in values.items():
            fh.write(f"{name}={value}\n")


def check_tokens(config: ActionConfig) -> tuple[str, str]:
    """Return the GitHub and npm tokens, or fail before anything is touched."""
    if not config.github_token:
        raise MissingInputError(
            "Please add the GITHUB_TOKEN to the changeset-release action"
        )
    if not config.npm_token:
        raise MissingInputError(
            "Please add the NPM_TOKEN to the changeset-release action"
        )
    return (
        config.github_token.get_secret_value(),
        config.npm_token.get_secret_value(),
    )


def setup_credentials(config: ActionConfig, github_token: str, npm_token: str) -> None:
    if config.setup_git_user:
        step("Setting git user")
        setup_git_user(config.cwd)

    step("Setting npm credentials")
    configure_npmrc(npm_token, config.home)

    step("Setting GitHub credentials")
    write_netrc(github_token, config.home)


def run_prepare_script(script: str, cwd: Path) -> None:
    """Run the user's prepare command, split on whitespace, in cwd.

    Raises:
        CommandError: If the command exits non-zero.
    """
    step(f"Running prepare script: {script}")
    command, *args = script.split()
    result = exec_with_output(command, *args, cwd=cwd)
    if result.returncode != 0:
        raise CommandError(
            result.args,
            result.returncode,
            result.stdout,
            result.stderr,
            message="Failed to run 'prepareScript' command",
        )
    print(result.stdout)


def run_action(
    config: ActionConfig,
    context: GitHubContext,
    github_output: str | None = None,
) -> ActionOutputs:
    """Execute a full release run.

    Args:
        config: Inputs and credentials.
        context: The triggering repository, ref and commit.
        github_output: Path of the $GITHUB_OUTPUT file, if running in Actions.

    Returns:
        The outputs reported to the calling workflow.

    Raises:
        ActionError: On any fatal condition. Outputs are still written when
            the failure happens after changesets were read.
    """
    github_token, npm_token = check_tokens(config)
    setup_credentials(config, github_token, npm_token)

    step("Reading changesets")
    state = read_changeset_state(config.cwd)
    for changeset in state.changesets:
        print(f"  {changeset.id}: {', '.join(changeset.package_names) or '<empty>'}")

    outputs = ActionOutputs(has_changesets=state.has_changesets)
    try:
        if not state.has_changesets:
            print("  No changesets found")
            return outputs

        if not config.tag:
            raise MissingInputError(
                "Please configure the 'tag' name you wish to use for the release."
            )

        run_version(config, context, pre_state=state.pre_state)

        if config.prepare_script:
            run_prepare_script(config.prepare_script, config.cwd)

        result = run_publish(config, context)
        print(f"Publish result: {result.model_dump_json()}")
        if result.published:
            outputs.published = True
            outputs.published_packages = result.published_packages
        return outputs
    finally:
        step("Setting outputs")
        write_outputs(outputs, github_output)
