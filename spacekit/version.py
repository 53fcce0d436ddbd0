"""Calculation of the next release version from Git history and version tags."""

from __future__ import annotations

import logging
import os
import re
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import semver
import tomlkit
from tomlkit.exceptions import TOMLKitError

log = logging.getLogger(__name__)

CALCULATED_VERSION_KEY = "CALCULATED_VERSION"
PREV_RELEASE_VERSION_KEY = "PREV_RELEASE_VERSION"
IS_PRE_RELEASE_KEY = "IS_PRE_RELEASE"


class VersionError(Exception):
    """Raised when the version cannot be calculated or applied."""


@dataclass
class VersionOptions:
    """Settings of the version command."""

    repo_root_dir: str | None = None
    version_tag_prefix: str | None = None
    max_commit_count: int = 1000
    release_branch_name: str = "main"
    no_branch_name: bool = False
    pre_release_name: str = "alpha"
    manifest_globs: list[str] = field(default_factory=lambda: ["**/Cargo.toml"])


@dataclass(frozen=True)
class ReleaseVersion:
    """A released version and the commit it was tagged on."""

    version: semver.Version
    commit_id: str


class GitRepository:
    """A Git repository, queried through the git executable."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()
        try:
            result = self._run("rev-parse", "--git-dir")
        except VersionError as error:
            raise VersionError(f"Could not open the Git repository at {self.root}: {error}") from error
        if result.returncode != 0:
            raise VersionError(
                f"Could not open the Git repository at {self.root}: {result.stderr.strip()}"
            )

    def _run(self, *args: str) -> subprocess.CompletedProcess[str]:
        env = dict(os.environ)
        env["GIT_CEILING_DIRECTORIES"] = str(self.root.parent)
        try:
            return subprocess.run(
                ["git", *args],
                cwd=self.root,
                env=env,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as error:
            raise VersionError(f"Unable to run git: {error}") from error

    def _git(self, *args: str) -> str:
        result = self._run(*args)
        if result.returncode != 0:
            raise VersionError(f"git {' '.join(args)} failed: {result.stderr.strip()}")
        return result.stdout

    def head_commit_id(self) -> str:
        """The id of the commit that HEAD points to."""
        return self._git("rev-parse", "HEAD").strip()

    def branch_name(self) -> str:
        """The current branch name, or ``HEAD`` when detached."""
        result = self._run("symbolic-ref", "-q", "HEAD")
        name = result.stdout.strip() if result.returncode == 0 else "HEAD"
        return name.removeprefix("refs/heads/")

    def commits_desc_by_date(self, max_count: int) -> list[str]:
        """Ids of at most ``max_count`` commits reachable from HEAD, newest first."""
        output = self._git("rev-list", "--date-order", f"--max-count={max_count}", "HEAD")
        return output.split()

    def commit_id_to_tags(self) -> dict[str, set[str]]:
        """Map commit ids to the names of the tags that point directly at them."""
        output = self._git(
            "for-each-ref", "refs/tags", "--format=%(objecttype) %(objectname) %(refname:strip=2)"
        )
        mapping: dict[str, set[str]] = {}
        for line in output.splitlines():
            parts = line.split(" ", 2)
            if len(parts) != 3:
                continue
            object_type, object_id, tag = parts
            # Annotated tags point at a tag object, not a commit, and are not considered.
            if object_type == "commit":
                mapping.setdefault(object_id, set()).add(tag)
        return mapping


class PipelineService(ABC):
    """A build pipeline that receives the calculated version variables."""

    name: str = ""
    host_is_build_agent: bool = False

    @abstractmethod
    def detect(self) -> bool:
        """Whether the process runs inside this pipeline."""

    @abstractmethod
    def set_env_var(self, key: str, value: str) -> None:
        """Make ``key`` available as an environment variable."""

    @abstractmethod
    def set_pipeline_var(self, name: str, value: str) -> None:
        """Make ``name`` available as a pipeline variable."""


class GitHubActions(PipelineService):
    name = "GitHub Actions"
    host_is_build_agent = True

    def detect(self) -> bool:
        return "GITHUB_ACTIONS" in os.environ

    def set_env_var(self, key: str, value: str) -> None:
        _append_to_github_pipeline_file("GITHUB_ENV", key, value)
        _append_to_github_pipeline_file("GITHUB_OUTPUT", key, value)

    def set_pipeline_var(self, name: str, value: str) -> None:
        try:
            result = subprocess.run(
                ["echo", f"::set-env name={name}::{value}"],
                capture_output=True,
                check=False,
            )
        except OSError as error:
            raise VersionError("Failed to set pipeline variable!") from error
        if result.returncode != 0:
            raise VersionError(f"Unable to set pipeline variable named {name}!")


def _append_to_github_pipeline_file(file_env_var: str, key: str, value: str) -> None:
    file_path = os.environ.get(file_env_var)
    if file_path is None:
        raise VersionError(f"The ${file_env_var} environment variable is not set!")
    try:
        with open(file_path, "a", encoding="utf-8") as file:
            file.write(f"\n{key}={value}\n")
    except OSError as error:
        raise VersionError(f"Failed to write to ${file_env_var} file!") from error


class LocalPipelineService(PipelineService):
    name = "local or unsupported"
    host_is_build_agent = False

    def detect(self) -> bool:
        # A local host cannot be reliably detected.
        return False

    def set_env_var(self, key: str, value: str) -> None:
        os.environ[key] = value

    def set_pipeline_var(self, name: str, value: str) -> None:
        pass


def _parse_release_tag(tag: str, version_tag_prefix: str | None) -> semver.Version | None:
    if version_tag_prefix is not None:
        if not tag.startswith(version_tag_prefix):
            return None
        tag = tag[len(version_tag_prefix):]
    try:
        version = semver.Version.parse(tag)
    except ValueError:
        return None
    return None if version.prerelease else version


def get_release_versions(
    commits: Sequence[str],
    commit_id_to_tags: Mapping[str, Iterable[str]],
    version_tag_prefix: str | None = None,
) -> tuple[list[ReleaseVersion], int]:
    """Find release versions, oldest first, and the number of commits since the last one.

    ``commits`` are commit ids ordered newest first.
    """
    depth = 0
    releases: list[ReleaseVersion] = []
    for commit_id in reversed(commits):
        versions = [
            version
            for version in (
                _parse_release_tag(tag, version_tag_prefix)
                for tag in commit_id_to_tags.get(commit_id, ())
            )
            if version is not None
        ]
        if versions:
            depth = 0
            releases.append(ReleaseVersion(max(versions), commit_id))
        else:
            depth += 1

    log.info(
        "Detected %d release version(s) and final depth (commits since previous release version) was %d",
        len(releases),
        depth,
    )
    return releases, depth


def is_release_branch(branch_name: str, release_branch_name: str) -> bool:
    log.info("Configured release branch name is %s", release_branch_name)
    result = branch_name == release_branch_name
    log.info("Current branch is release branch? %s", result)
    return result


def get_prerelease_branch_component(branch_name: str) -> str:
    component = branch_name.replace("/", ".")
    log.debug("Branch name component for potential pre-release version: %s", component)
    return component


def calculate_version(
    release_versions: Sequence[ReleaseVersion],
    depth: int,
    head_commit_id: str,
    branch_name: str,
    options: VersionOptions,
) -> tuple[str, str, bool]:
    """Return the calculated version, the previous release version and whether it is a pre-release."""
    current = release_versions[-1] if release_versions else None
    last_commit_was_release = current is not None and current.commit_id == head_commit_id
    log.info("Was the last commit a release? %s", last_commit_was_release)

    release_branch = is_release_branch(branch_name, options.release_branch_name)
    prev_release_version = str(release_versions[-2].version) if len(release_versions) > 1 else ""

    if current is not None and last_commit_was_release:
        calculated = current.version
    elif current is not None:
        if release_branch or options.no_branch_name:
            pre_release_name = options.pre_release_name
        else:
            pre_release_name = get_prerelease_branch_component(branch_name)
        prev_release_version = str(current.version)
        next_version = current.version.replace(patch=current.version.patch + 1)
        text = f"{next_version}-{pre_release_name}"
        if depth > 0:
            text += f".{depth}"
        try:
            calculated = semver.Version.parse(text)
        except ValueError as error:
            raise VersionError("The calculated next version was not SemVer2 compliant!") from error
    else:
        calculated = semver.Version.parse("0.0.0")

    prefix = options.version_tag_prefix
    calculated_text = f"{prefix}{calculated}" if prefix is not None else str(calculated)
    if prev_release_version and prefix is not None:
        prev_release_version = f"{prefix}{prev_release_version}"

    log.info("The calculated version is %s", calculated_text)
    if prev_release_version:
        log.info("The previous release version was: %s", prev_release_version)
    else:
        log.info("No previous release was found.")

    return calculated_text, prev_release_version, not last_commit_was_release


def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a glob into a regular expression matched against a whole '/'-separated path.

    ``*`` and ``**`` match any characters, including separators; a ``**/`` component also
    matches nothing. ``?``, ``[...]``, ``[!...]`` and ``{a,b}`` are supported.
    """
    out: list[str] = []
    i = 0
    n = len(pattern)
    in_alternation = False
    while i < n:
        char = pattern[i]
        if char == "*":
            if pattern.startswith("**", i):
                at_component_start = i == 0 or pattern[i - 1] in "/{,"
                after = i + 2
                if at_component_start and pattern.startswith("/", after):
                    out.append("(?:.*/)?")
                    i = after + 1
                else:
                    out.append(".*")
                    i = after
                continue
            out.append(".*")
        elif char == "?":
            out.append(".")
        elif char == "[":
            j = i + 1
            if j < n and pattern[j] in "!^":
                j += 1
            if j < n and pattern[j] == "]":
                j += 1
            close = pattern.find("]", j)
            if close == -1:
                raise VersionError(f"Unclosed character class in glob pattern {pattern!r}")
            body = pattern[i + 1:close].replace("\\", "\\\\").replace("[", "\\[")
            if body.startswith("!"):
                body = "^" + body[1:]
            out.append(f"[{body}]")
            i = close + 1
            continue
        elif char == "{":
            if in_alternation:
                raise VersionError(f"Nested alternation in glob pattern {pattern!r}")
            in_alternation = True
            out.append("(?:")
        elif char == "}" and in_alternation:
            in_alternation = False
            out.append(")")
        elif char == "," and in_alternation:
            out.append("|")
        elif char == "\\":
            if i + 1 >= n:
                raise VersionError(f"Dangling escape in glob pattern {pattern!r}")
            out.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        else:
            out.append(re.escape(char))
        i += 1
    if in_alternation:
        raise VersionError(f"Unclosed alternation in glob pattern {pattern!r}")
    return re.compile("".join(out), re.DOTALL)


def find_manifests(root_path: str | Path, patterns: Iterable[str | re.Pattern[str]]) -> list[Path]:
    """Paths of files below ``root_path``, relative to it, that match any pattern."""
    root = Path(root_path)
    compiled = [p if isinstance(p, re.Pattern) else glob_to_regex(p) for p in patterns]
    found: set[Path] = set()
    for directory, _, files in os.walk(root):
        for file_name in files:
            relative = (Path(directory) / file_name).relative_to(root)
            text = relative.as_posix()
            if any(regex.fullmatch(text) for regex in compiled):
                found.add(relative)
    return sorted(found)


def update_manifests(
    repo_root_path: str | Path, manifest_globs: Iterable[str], calculated_version: str
) -> list[Path]:
    """Set the package version of matching manifests still at 0.0.0; return the updated files."""
    root = Path(repo_root_path)
    try:
        patterns = [glob_to_regex(glob) for glob in manifest_globs]
    except VersionError as error:
        raise VersionError("Failed to parse glob pattern!") from error

    paths = find_manifests(root, patterns)
    log.info("Found %d manifest files to update.", len(paths))

    updated: list[Path] = []
    for relative in paths:
        path = root / relative
        try:
            document = tomlkit.parse(path.read_text(encoding="utf-8"))
            if "package" not in document:
                log.warning("Did not find a [package] key in manifest file %s. Skipping this file.", path)
                continue
            package = document["package"]
            current = package.get("version") if hasattr(package, "get") else None
            current_text = str(current).strip().strip('"') if current is not None else ""
            if current_text != "0.0.0":
                log.warning(
                    "The package version in manifest file %s is %s. Only package versions that are "
                    "set to 0.0.0 are updated. NOT updating.",
                    path,
                    current_text,
                )
                continue
            package["version"] = calculated_version
            path.write_text(tomlkit.dumps(document), encoding="utf-8")
            log.info("Updated package version to %s in manifest file %s", calculated_version, path)
            updated.append(path)
        except (OSError, TOMLKitError) as error:
            raise VersionError("Failed to update a manifest file!") from error
    return updated


def detect_pipeline_service() -> PipelineService:
    """The first pipeline service detected, or the local one."""
    service: PipelineService = next(
        (candidate for candidate in (GitHubActions(),) if candidate.detect()),
        LocalPipelineService(),
    )
    log.info("Detected pipeline service: %s", service.name)
    return service


def set_pipeline_service_vars(
    pipeline_service: PipelineService,
    calculated_version: str,
    prev_release_version: str,
    is_pre_release: bool,
) -> None:
    values = (
        (CALCULATED_VERSION_KEY, calculated_version),
        (PREV_RELEASE_VERSION_KEY, prev_release_version),
        (IS_PRE_RELEASE_KEY, "true" if is_pre_release else "false"),
    )
    for key, value in values:
        pipeline_service.set_env_var(key, value)
    for key, value in values:
        pipeline_service.set_pipeline_var(key, value)


class VersionCommand:
    """Determines the previous and next version numbers from repository history."""

    def __init__(self, options: VersionOptions | None = None) -> None:
        self.options = options if options is not None else VersionOptions()

    def run(self) -> str:
        """Calculate the version, publish it to the pipeline and return it."""
        options = self.options
        pipeline_service = detect_pipeline_service()

        repo_root = Path(options.repo_root_dir) if options.repo_root_dir else Path.cwd()
        repo = GitRepository(repo_root)

        tags = repo.commit_id_to_tags()
        commits = repo.commits_desc_by_date(options.max_commit_count)
        releases, depth = get_release_versions(commits, tags, options.version_tag_prefix)
        head = repo.head_commit_id() if releases else ""

        calculated, prev_release, is_pre_release = calculate_version(
            releases, depth, head, repo.branch_name(), options
        )

        set_pipeline_service_vars(pipeline_service, calculated, prev_release, is_pre_release)

        if pipeline_service.host_is_build_agent:
            update_manifests(repo_root, options.manifest_globs, calculated)
        else:
            log.info(
                "Not updating the version in any package manifests, as the host was not "
                "detected as a build agent."
            )
        return calculated