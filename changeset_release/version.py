"""Version workflow: apply changesets → diff manifests → open/update the PR.

1. Check out the version branch (changeset-release/<base>) at the triggering
   commit
2. Snapshot package versions
3. Run the versioning tool, which consumes changesets and bumps versions
4. Snapshot again and diff to find the bumped packages
5. Commit and force-push the version branch
6. Create the "Version Packages" PR, or update the one that is already open

The base branch is checked out again afterwards, so whatever runs next sees
the repository as it was pushed.
"""

from __future__ import annotations

from pathlib import Path

from .changelog import get_changelog_entry
from .config import ActionConfig, GitHubContext
from .github import create_pull_request, find_open_pull_request, update_pull_request
from .gitutils import (
    commit_all,
    force_checkout,
    force_push_branch,
    is_clean,
    reset_hard,
    switch_to_maybe_existing_branch,
)
from .manifests import diff_versions, discover_packages, snapshot_versions
from .models import ChangedPackage, ChangelogEntry, PreState, PullRequest
from .shell import step
from .tools import ChangesetCli
from .versions import bump_level

VERSION_BRANCH_PREFIX = "changeset-release/"
DEFAULT_TAG = "latest"

OMITTED_CHANGELOG_NOTE = (
    "> The changelog information of each package has been omitted from this "
    "message, as the content exceeds the size limit."
)


def version_branch_for(base_branch: str) -> str:
    return f"{VERSION_BRANCH_PREFIX}{base_branch}"


def read_changelog_entry(root: Path, pkg_dir: str, version: str) -> ChangelogEntry:
    """The CHANGELOG.md section of a package for one version.

    A package without a changelog gets an empty entry.
    """
    changelog = root / pkg_dir / "CHANGELOG.md"
    if not changelog.exists():
        return ChangelogEntry(content="")
    return get_changelog_entry(changelog.read_text(), version)


def collect_changed_packages(
    root: Path, before: dict[str, str]
) -> list[ChangedPackage]:
    """Diff current versions against a snapshot and attach changelog entries.

    Sorted so the biggest bumps come first, then by name. When a changelog
    has no change-type headings, the version difference decides the level.
    """
    changed: list[ChangedPackage] = []
    for info, bump in diff_versions(before, discover_packages(root)):
        entry = read_changelog_entry(root, info.dir, info.version)
        if entry.highest_level == 0:
            entry.highest_level = bump_level(bump.old, bump.new)
        changed.append(ChangedPackage(package=info, bump=bump, changelog=entry))

    changed.sort(key=lambda c: (-c.changelog.highest_level, c.package.name))
    return changed


def get_pr_title(title: str, tag: str | None, pre_state: PreState | None) -> str:
    """PR title, suffixed with the prerelease or release channel tag."""
    if pre_state is not None and pre_state.mode == "pre":
        return f"{title} ({pre_state.tag})"
    if tag and tag != DEFAULT_TAG:
        return f"{title} ({tag})"
    return title


def get_version_pr_body(
    changed: list[ChangedPackage],
    base_branch: str,
    pre_state: PreState | None = None,
    max_characters: int | None = None,
) -> str:
    """Render the description of the version PR.

    Lists every bumped package as `## name@version` followed by its changelog
    entry. If the result exceeds max_characters, the changelog entries are
    dropped; if it is still too long, it is cut off.
    """
    intro = (
        "This PR was opened by the changeset-release GitHub Action. When you're "
        "ready to do a release, you can merge this and the packages will be "
        "published automatically. If you're not ready to do a release yet, "
        "that's fine, whenever you add more changesets to "
        f"{base_branch}, this PR will be updated."
    )

    header = [intro]
    if pre_state is not None and pre_state.mode == "pre":
        header.append(
            f"⚠️⚠️⚠️⚠️⚠️⚠️\n\n"
            f"`{base_branch}` is currently in **pre mode** so this branch has "
            f"prereleases rather than normal releases. If you want to exit "
            f"prereleases, run `changeset pre exit` on `{base_branch}`.\n\n"
            f"⚠️⚠️⚠️⚠️⚠️⚠️"
        )
    header.append("# Releases")

    def render(with_changelogs: bool) -> str:
        sections = list(header)
        if not with_changelogs:
            sections.append(OMITTED_CHANGELOG_NOTE)
        for c in changed:
            heading = f"## {c.package.name}@{c.package.version}"
            if with_changelogs and c.changelog.content:
                sections.append(f"{heading}\n\n{c.changelog.content}")
            else:
                sections.append(heading)
        return "\n\n".join(sections) + "\n"

    body = render(with_changelogs=True)
    if max_characters is None or len(body) <= max_characters:
        return body

    body = render(with_changelogs=False)
    if len(body) <= max_characters:
        return body
    return body[:max_characters]


def run_version(
    config: ActionConfig,
    context: GitHubContext,
    tool: ChangesetCli | None = None,
    pre_state: PreState | None = None,
) -> PullRequest | None:
    """Apply pending changesets and open or update the version PR.

    Args:
        config: Run configuration (cwd, release tag, PR title, ...).
        context: Repository, base branch and triggering commit.
        tool: Versioning tool; defaults to the changesets CLI in config.cwd.
        pre_state: Prerelease state, for the PR title and body.

    Returns:
        The version PR, or None when versioning changed nothing.

    Raises:
        CommandError: If the versioning tool or a git/gh command fails.
    """
    cwd = config.cwd
    tool = tool or ChangesetCli(cwd)
    base_branch = context.branch
    version_branch = version_branch_for(base_branch)

    step(f"Preparing {version_branch}")
    switch_to_maybe_existing_branch(version_branch, cwd)
    reset_hard(context.sha, cwd)

    try:
        before = snapshot_versions(cwd)

        step("Running versioning tool")
        tool.version()

        changed = collect_changed_packages(cwd, before)
        for c in changed:
            print(f"  {c.package.name}: {c.bump.old or '<new>'} → {c.bump.new}")

        clean = is_clean(cwd)
        if not changed and clean:
            print("  Versioning produced no changes, leaving the PR alone")
            return None

        step(f"Pushing {version_branch}")
        if not clean:
            message = get_pr_title(config.commit_message, config.tag, pre_state)
            commit_all(message, cwd)
        force_push_branch(version_branch, cwd)

        title = get_pr_title(config.pr_title, config.tag, pre_state)
        body = get_version_pr_body(
            changed,
            base_branch,
            pre_state=pre_state,
            max_characters=config.pr_body_max_characters,
        )
        return _upsert_pull_request(
            context, version_branch, title, body, cwd, config.gh_token
        )
    finally:
        force_checkout(context.sha, cwd)


def _upsert_pull_request(
    context: GitHubContext,
    head: str,
    title: str,
    body: str,
    cwd: Path,
    token: str | None,
) -> PullRequest:
    step("Updating version PR")
    existing = find_open_pull_request(
        context.repository, head, context.branch, cwd, token=token
    )
    if existing is None:
        pr = create_pull_request(
            context.repository, head, context.branch, title, body, cwd, token=token
        )
        print(f"  Created #{pr.number} {pr.url}")
        return pr

    update_pull_request(context.repository, existing, title, body, cwd, token=token)
    print(f"  Updated #{existing.number}")
    return existing
