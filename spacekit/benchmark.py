"""Runs the benchmarks against a known sample directory structure."""

from __future__ import annotations

import shutil
import subprocess
import urllib.error
import urllib.request
import zipfile
from collections.abc import Iterable
from pathlib import Path

from tqdm import tqdm

SAMPLE_DIR_NAME = "tmp.sample"
SAMPLE_ARCHIVE_NAME = "tmp.sample.zip"
SAMPLE_ARCHIVE_SIZE = 231_784_731


def download_file(url: str, path: str | Path) -> None:
    """Download ``url`` into the file at ``path``."""
    try:
        with urllib.request.urlopen(url) as response, open(path, "wb") as file:
            shutil.copyfileobj(response, file)
    except urllib.error.HTTPError as error:
        raise RuntimeError(f"Failed to download the file: {error.code} {error.reason}") from error


def unzip(zip_file_path: str | Path, extract_dir_path: str | Path) -> int:
    """Extract every entry of the archive into the directory; return the entry count."""
    extract_dir = Path(extract_dir_path)
    with zipfile.ZipFile(zip_file_path) as archive:
        entries = archive.infolist()
        with tqdm(total=len(entries), desc=f"Extracting {zip_file_path}", unit="file") as progress:
            for entry in entries:
                target = extract_dir / entry.filename
                if entry.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                else:
                    target.parent.mkdir(parents=True, exist_ok=True)
                    with archive.open(entry) as source, open(target, "wb") as destination:
                        shutil.copyfileobj(source, destination)
                progress.update(1)
    print("✔️ Extracted successfully.")
    return len(entries)


class BenchmarkCommand:
    """Prepares the sample files and runs the benchmarks."""

    def __init__(
        self,
        bench_names: Iterable[str] | None = None,
        sample_url: str | None = None,
        working_dir: str | Path | None = None,
    ) -> None:
        self.bench_names = list(bench_names) if bench_names is not None else None
        self.sample_url = sample_url
        self.working_dir = Path(working_dir) if working_dir is not None else None

    def cargo_args(self) -> list[str]:
        args = ["bench"]
        for name in self.bench_names or ():
            args += ["--bench", name]
        return args

    def run(self) -> None:
        print("👷 Running benchmark tests ...")
        base = self.working_dir if self.working_dir is not None else Path.cwd()
        sample_dir = base / SAMPLE_DIR_NAME
        archive = base / SAMPLE_ARCHIVE_NAME

        if sample_dir.is_dir() and any(sample_dir.iterdir()):
            print(f"✔️ Sample files and directories found at {sample_dir}")
        else:
            print(f"👷 Creating directory {sample_dir}")
            sample_dir.mkdir(parents=True, exist_ok=True)
            print("✔️ Created successfully.")

            if not archive.exists() or archive.stat().st_size != SAMPLE_ARCHIVE_SIZE:
                if self.sample_url is None:
                    raise ValueError(
                        f"No sample archive found at {archive} and no sample URL was given."
                    )
                print("👷 Downloading archive containing sample files and directories ...")
                download_file(self.sample_url, archive)
                print("✔️ Downloaded sample successfully.")
            else:
                print(f"✔️ Found sample zip file at {archive}")

            print("👷 Extracting the zip file ...")
            unzip(archive, sample_dir)

        print("👷 Running benchmarks ...")
        subprocess.run(["cargo", *self.cargo_args()], cwd=base, check=True)
        print("✔️ Benchmarks completed successfully.")