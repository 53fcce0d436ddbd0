# spacekit

spacekit has two parts:

- **Building blocks for a disk space view.** These are tree rows (`spacekit.row_item`), colour skins (`spacekit.skin`), a small environment service (`spacekit.environment`) and a `ViewCommand` (`spacekit.view_command`). The `ViewCommand` checks the target paths and picks a skin from the terminal's colour support.
- **`buildit`.** This is a command-line helper for a Cargo-based project. It runs the tests with code coverage, runs benchmarks against a sample directory tree, and works out the next version number from the Git history.

## Installation

```
pip install spacekit
```

To run the test suite, install the `test` extra:

```
pip install "spacekit[test]"
pytest
```

## The `buildit` command

```
buildit coverage [-o {cobertura,html,lcov}] [--package NAME]
                 [--exclude-files GLOB ...] [--include-ignored]
buildit benchmark [--bench-names NAME ...] [--sample-url URL]
buildit version [-r REPO_ROOT_DIR] [-p VERSION_TAG_PREFIX]
                [--max-commit-count N] [--release-branch-name NAME]
                [--no-branch-name] [--pre-release-name NAME]
                [-m MANIFEST_GLOBS]
```

`-o` and `-m` can be given more than once. Values of `--exclude-files`, `--bench-names` and `-m` may also hold several entries separated by spaces.

The command exits with status 0 on success. On failure it prints `❌` followed by the error to standard error and exits with status 1. Set the `BUILDIT_LOG` environment variable to a logging level name, such as `INFO` or `DEBUG`, to see log output. The default level is `WARNING`.

### coverage

`buildit coverage` does the following:

1. Deletes and recreates the `coverage` directory.
2. Sets `CARGO_TARGET_DIR` to `./target_coverage` and runs `cargo test --all-features` with coverage instrumentation.
   - With `--package`, the package is passed to `cargo test`.
   - With `--include-ignored`, the ignored tests are run as well.
3. Calls `grcov` to write the reports into `coverage`. The default report types are `html,lcov`. Files matching `--exclude-files` are ignored.
4. Removes every `*.profraw` file below the working directory.

`cargo` and `grcov` must be available on `PATH`.

### benchmark

`buildit benchmark` makes sure that the directory `tmp.sample` holds files.

If the directory is missing or empty, the command looks for `tmp.sample.zip`. When that archive is missing, or does not have the expected size, it is downloaded from `--sample-url`. There is no default URL: if no URL is given and the archive is not present, the command fails. The archive is then extracted into `tmp.sample`, with a progress bar.

Finally the command runs `cargo bench`, adding one `--bench` for each name given with `--bench-names`.

### version

`buildit version` reads the repository with the `git` executable, which must be on `PATH`.

The candidate tags are lightweight tags that point at commits. A tag counts as a release tag when it is a SemVer version without a pre-release part, after any `--version-tag-prefix` has been removed. When a commit carries several release tags, the highest one is used.

The version is calculated as follows:

- If the head commit is a release, its version is used unchanged.
- Otherwise the patch number of the last release is incremented and a pre-release label is added.
  - The label is the branch name, with `/` replaced by `.`.
  - The label is `--pre-release-name` instead (default `alpha`) when on the release branch (default `main`) or when `--no-branch-name` is given.
  - A `.N` suffix gives the number of commits since that release.
- If there is no release yet, the version is `0.0.0`.

The version tag prefix, if given, is put in front of the result.

The values are exported as `CALCULATED_VERSION`, `PREV_RELEASE_VERSION` and `IS_PRE_RELEASE`.

- **Locally,** they are set in the process environment only.
- **On GitHub Actions** (detected through `GITHUB_ACTIONS`), they are appended to the files named by `GITHUB_ENV` and `GITHUB_OUTPUT`. In addition, the manifests matching `--manifest-globs` (default `**/Cargo.toml`) get their `[package]` version set to the result. This happens only where that version is still `0.0.0`.

## Library use

```python
from spacekit.version import (
    VersionOptions, calculate_version, get_prerelease_branch_component,
    get_release_versions, is_release_branch,
)

get_prerelease_branch_component("feature/login")   # "feature.login"
is_release_branch("main", "main")                  # True

commits = ["c3", "c2", "c1"]                        # newest first
releases, depth = get_release_versions(commits, {"c1": {"1.2.3"}})
calculate_version(releases, depth, "c3", "main", VersionOptions())
# ("1.2.4-alpha.2", "1.2.3", True)
```

`glob_to_regex`, `find_manifests` and `update_manifests` give the manifest matching and updating on their own. `GitRepository` wraps the `git` queries that `VersionCommand` uses.

```python
from spacekit.row_item import RowItem, RowItemType

root = RowItem("project", RowItemType.DIRECTORY, expanded=True)
src = root.add_child(RowItem("src", RowItemType.DIRECTORY))
src.add_child(RowItem("main.rs", RowItemType.FILE))
root.update_tree_prefix("", False)    # fills in tree_prefix for every row
src.get_path()                        # Path("project/src")
```

```python
from spacekit.view_command import ViewCommand

command = ViewCommand(target_paths=None)
command.prepare()              # falls back to the current directory
command.get_color_count()      # from COLORTERM, else TERM; None if unknown
skin = command.select_skin()   # full colour only above 256 colours
```

`ViewCommand.prepare` raises `CommandError` when a target path does not exist.

## What is not included

spacekit does not scan directories or measure how much space they use. It has no interactive tree screen, no non-interactive listing and no deletion of files. `ViewCommand` only validates its target paths and chooses a skin. The rows in `spacekit.row_item` have to be built by the caller.