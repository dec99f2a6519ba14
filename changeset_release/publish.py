"""Publish workflow: publish → push tags → parse output → GitHub releases.

The publish tool decides what to publish: it skips every package whose
current version is already on the registry. Its output is the only record
of what it did, so it is parsed to recover the newly published packages,
and a GitHub release is created for each of them.
"""

from __future__ import annotations

from .config import ActionConfig, GitHubContext
from .errors import PublishError
from .github import create_or_update_release
from .gitutils import push_tags
from .manifests import discover_packages, is_single_package
from .models import PackageInfo, PublishedPackage, PublishResult
from .shell import step, warning
from .tools import ChangesetCli, has_new_tag, parse_publish_output
from .version import DEFAULT_TAG, read_changelog_entry
from .versions import is_prerelease


def resolve_published(
    stdout: str, packages: dict[str, PackageInfo]
) -> list[tuple[PackageInfo, PublishedPackage, str]]:
    """Map publish output back to workspace packages and their release tags.

    Returns:
        (package, published version, git tag) triples, in the order the
        tool reported them.

    Raises:
        PublishError: If the output names a package that isn't in the
            workspace, or the repository has no packages at all.
    """
    if not packages:
        raise PublishError("No packages found in the repository")

    if is_single_package(packages):
        pkg = next(iter(packages.values()))
        # A private root is never published, whatever tags were created
        if pkg.private or not has_new_tag(stdout):
            return []
        published = PublishedPackage(name=pkg.name, version=pkg.version)
        return [(pkg, published, f"v{pkg.version}")]

    by_name = {info.name: info for info in packages.values()}
    released: list[tuple[PackageInfo, PublishedPackage, str]] = []
    for published in parse_publish_output(stdout):
        info = by_name.get(published.name)
        if info is None:
            raise PublishError(
                f"Package {published.name!r} was published but is not in the "
                "workspace. This is probably a bug in changeset-release, please "
                "open an issue."
            )
        released.append((info, published, f"{published.name}@{published.version}"))
    return released


def run_publish(
    config: ActionConfig,
    context: GitHubContext,
    tool: ChangesetCli | None = None,
) -> PublishResult:
    """Publish pending package versions and create their GitHub releases.

    Running this again for the same versions publishes nothing and returns
    an unpublished result; the tool's own registry check is trusted.

    Raises:
        CommandError: If the publish tool or a git/gh command fails.
        PublishError: If the output can't be mapped to workspace packages.
    """
    cwd = config.cwd
    tool = tool or ChangesetCli(cwd)
    tag = config.tag or DEFAULT_TAG

    step(f"Publishing with tag {tag!r}")
    stdout = tool.publish(tag)

    step("Pushing tags")
    push_tags(cwd)

    released = resolve_published(stdout, discover_packages(cwd))
    if not released:
        print("  Nothing new was published")
        return PublishResult()

    if config.create_github_releases:
        step("Creating GitHub releases")
        for info, published, release_tag in released:
            entry = read_changelog_entry(cwd, info.dir, published.version)
            if not entry.content:
                warning(f"No changelog entry found for {release_tag}")
            create_or_update_release(
                context.repository,
                release_tag,
                entry.content,
                prerelease=is_prerelease(published.version),
                cwd=cwd,
                token=config.gh_token,
            )
            print(f"  {release_tag}")

    return PublishResult.from_packages([published for _, published, _ in released])
