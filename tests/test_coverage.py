import os
import re
import subprocess
from unittest import mock

import pytest

from spacekit.coverage import (
    CoverageCommand,
    CoverageOptions,
    CoverageReportType,
    clean_files,
)


def _ok(*args, **kwargs):
    return subprocess.CompletedProcess(args=args, returncode=0)


def test_report_types_are_joined_as_lowercase_values():
    command = CoverageCommand(CoverageOptions(output_types=list(CoverageReportType)))
    assert command.output_types_arg() == "cobertura,html,lcov"


def test_report_type_from_value():
    assert CoverageReportType("lcov") is CoverageReportType.LCOV


def test_output_types_default():
    assert CoverageCommand().output_types_arg() == "html,lcov"


def test_output_types_given():
    command = CoverageCommand(
        CoverageOptions(output_types=[CoverageReportType.COBERTURA, CoverageReportType.LCOV])
    )
    assert command.output_types_arg().split(",") == ["cobertura", "lcov"]


def test_cargo_test_args_minimal():
    assert CoverageCommand().cargo_test_args() == ["test", "--all-features"]


def test_cargo_test_args_with_package_and_ignored():
    command = CoverageCommand(CoverageOptions(package="space_rs", include_ignored=True))
    assert command.cargo_test_args() == [
        "test", "--all-features", "--package", "space_rs", "--", "--include-ignored",
    ]


def test_grcov_args_structure(tmp_path):
    command = CoverageCommand(CoverageOptions(exclude_file_globs=["vendor/*", "gen/*"]))
    args = command.grcov_args(tmp_path / "coverage")
    assert args[0] == "."
    assert args[args.index("--binary-path") + 1] == "./target_coverage/debug/deps"
    assert args[args.index("-t") + 1] == "html,lcov"
    assert args[args.index("-o") + 1] == str(tmp_path / "coverage")
    assert args[-4:] == ["--ignore", "vendor/*", "--ignore", "gen/*"]
    assert "src/tests/*" in args


def test_excluded_lines_regex_matches_non_logic_lines():
    command = CoverageCommand()
    args = command.grcov_args("out")
    regex = re.compile(args[args.index("--excl-line") + 1])
    assert regex.search("    assert_eq!(a, b);")
    assert regex.search("    } else {")
    assert regex.search("// a comment")
    assert regex.search("pub struct Thing {")
    assert not regex.search("    let x = compute();")


def test_clean_files_removes_matching_files(tmp_path):
    (tmp_path / "a.profraw").write_text("x")
    (tmp_path / "nested").mkdir()
    (tmp_path / "nested" / "b.profraw").write_text("x")
    (tmp_path / "keep.txt").write_text("x")
    removed = clean_files(tmp_path, "**/*.profraw")
    assert {p.name for p in removed} == {"a.profraw", "b.profraw"}
    assert not (tmp_path / "a.profraw").exists()
    assert not (tmp_path / "nested" / "b.profraw").exists()
    assert (tmp_path / "keep.txt").exists()


def test_run_invokes_tools_and_cleans_up(tmp_path, monkeypatch):
    monkeypatch.setenv("CARGO_TARGET_DIR", "before")
    old = tmp_path / "coverage"
    old.mkdir()
    (old / "old.txt").write_text("stale")
    (tmp_path / "x.profraw").write_text("x")

    with mock.patch("spacekit.coverage.subprocess.run", side_effect=_ok) as run:
        report = CoverageCommand(CoverageOptions(package="pkg"), working_dir=tmp_path).run()

    assert report == tmp_path / "coverage" / "html" / "index.html"
    assert not (old / "old.txt").exists()
    assert (tmp_path / "coverage").is_dir()
    assert not (tmp_path / "x.profraw").exists()
    assert os.environ["CARGO_TARGET_DIR"] == "./target_coverage"

    first, second = run.call_args_list
    assert first.args[0] == ["cargo", "test", "--all-features", "--package", "pkg"]
    assert first.kwargs["env"]["RUSTFLAGS"] == "-Cinstrument-coverage"
    assert first.kwargs["env"]["LLVM_PROFILE_FILE"] == "cargo-test-%p-%m.profraw"
    assert second.args[0][0] == "grcov"


def test_run_propagates_tool_failure(tmp_path, monkeypatch):
    monkeypatch.setenv("CARGO_TARGET_DIR", "before")
    failure = subprocess.CalledProcessError(101, ["cargo"])
    with mock.patch("spacekit.coverage.subprocess.run", side_effect=failure):
        with pytest.raises(subprocess.CalledProcessError):
            CoverageCommand(working_dir=tmp_path).run()