"""Runs the test suite with coverage instrumentation and builds coverage reports."""

from __future__ import annotations

import enum
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

TARGET_COVERAGE_DIR = "./target_coverage"

# Lines that carry no logic and are excluded from coverage.
_EXCLUDED_LINE_PATTERNS = (
    r"^\s*(debug_)?assert(_eq|_ne)?!",
    r"^\s*#\[.*$",
    r"^\s*#!\[.*$",
    r"^\s*\}\s*else\s*\{\s*$",
    r"^\s*//.*$",
    r"^\s*(pub|pub\s*\(\s*crate\s*\)\s*)?\s*struct\s+[^ ]+\s*\{\s*$",
    r"^\s*(pub|pub\s*\(\s*crate\s*\)\s*)?\s*fn\s+.*\s*[(){}]*\s*$",
    r"^\s*(pub|pub\s*\(\s*crate\s*\)\s*)?\s*[^ ]+\s*:\s*[^ ]+\s*,\s*$",
    r"^\s*loop\s*\{\s*$",
    r"^\s*[^ ]+\s*=>\s*(\{)?\s*$",
    r"^\s*\)\s*->\s*[^ ]+\s*\{\s*$",
    r"^\s[});({]*\s*$",
    r"^\s*[{}(),;\[\] ]*\s*$",
    r"^\s*impl(<.*>)?\s*[^ ]+\s*\{\s*$",
    r"^\s*impl(<.*>)?\s*[^ ]+\s+for\s+[^ ]*\s*\{\s*$",
    r"^\s*(pub|pub\s*\(\s*crate\s*\)\s*)?\s*const\s+.*\s*[(){}]*\s*$",
)
EXCLUDED_LINES_REGEX = "|".join(_EXCLUDED_LINE_PATTERNS)

_DEFAULT_IGNORES = (
    "src/tests/*",
    "src/benches/*",
    "**/*_test.rs",
    "**/test_*.rs",
    "**/*_test_*.rs",
    "**/.cargo/*",
)


class CoverageReportType(enum.Enum):
    """The coverage report formats that can be generated."""

    COBERTURA = "cobertura"
    HTML = "html"
    LCOV = "lcov"

    def __str__(self) -> str:
        return self.value


@dataclass
class CoverageOptions:
    """Settings of the coverage command."""

    output_types: list[CoverageReportType] | None = None
    package: str | None = None
    exclude_file_globs: list[str] | None = None
    include_ignored: bool = False


def clean_files(root: str | Path, pattern: str) -> list[Path]:
    """Delete the files below ``root`` that match the glob ``pattern``; return them."""
    removed = sorted(path for path in Path(root).glob(pattern) if path.is_file())
    for path in removed:
        path.unlink()
    return removed


class CoverageCommand:
    """Builds, runs and measures the tests, then creates coverage reports."""

    def __init__(self, options: CoverageOptions | None = None, working_dir: str | Path | None = None) -> None:
        self.options = options if options is not None else CoverageOptions()
        self.working_dir = Path(working_dir) if working_dir is not None else None

    def cargo_test_args(self) -> list[str]:
        args = ["test", "--all-features"]
        if self.options.package is not None:
            args += ["--package", self.options.package]
        if self.options.include_ignored:
            args += ["--", "--include-ignored"]
        return args

    def output_types_arg(self) -> str:
        if self.options.output_types is None:
            return "html,lcov"
        return ",".join(str(output_type) for output_type in self.options.output_types)

    def grcov_args(self, output_path: str | Path) -> list[str]:
        args = [
            ".",
            "--binary-path", f"{TARGET_COVERAGE_DIR}/debug/deps",
            "-s", ".",
            "-t", self.output_types_arg(),
            "--excl-line", EXCLUDED_LINES_REGEX,
            "--ignore-not-existing",
            "--keep-only", "src/*",
        ]
        for ignored in _DEFAULT_IGNORES:
            args += ["--ignore", ignored]
        args += ["-o", str(output_path)]
        for glob in self.options.exclude_file_globs or ():
            args += ["--ignore", glob]
        return args

    def run(self) -> Path:
        """Run the instrumented tests and generate reports; return the HTML index path."""
        working_dir = self.working_dir if self.working_dir is not None else Path.cwd()
        output_path = working_dir / "coverage"

        if output_path.exists():
            print("👷 Deleting old reports ...")
            shutil.rmtree(output_path)

        print("👷 Creating coverage directory ...")
        output_path.mkdir(parents=True, exist_ok=True)

        print(f"👷 Setting target dir to {TARGET_COVERAGE_DIR}")
        os.environ["CARGO_TARGET_DIR"] = TARGET_COVERAGE_DIR

        print("👷 Running Tests with Code Coverage ...")
        env = dict(os.environ)
        env["RUSTFLAGS"] = "-Cinstrument-coverage"
        env["LLVM_PROFILE_FILE"] = "cargo-test-%p-%m.profraw"
        subprocess.run(["cargo", *self.cargo_test_args()], cwd=working_dir, env=env, check=True)
        print("✔️ Testing and Code Coverage completed successfully.")

        print("👷 Generating Reports ...")
        subprocess.run(["grcov", *self.grcov_args(output_path)], cwd=working_dir, check=True)
        report_path = output_path / "html" / "index.html"
        print(f"✔️ Code Coverage report was created successfully: file:///{report_path}")

        print("👷 Cleaning Up ...")
        clean_files(working_dir, "**/*.profraw")
        print("✔️ Cleanup completed.")
        return report_path