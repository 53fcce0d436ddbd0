import subprocess
import zipfile
from unittest import mock

import pytest

from spacekit.benchmark import BenchmarkCommand, download_file, unzip


def _ok(*args, **kwargs):
    return subprocess.CompletedProcess(args=args, returncode=0)


def _make_zip(path):
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("root/", "")
        archive.writestr("root/a.txt", "alpha")
        archive.writestr("root/sub/b.txt", "beta")
    return path


def test_cargo_args_without_names():
    assert BenchmarkCommand().cargo_args() == ["bench"]


def test_cargo_args_with_names():
    command = BenchmarkCommand(bench_names=["arenas_alloc", "arenas_read"])
    assert command.cargo_args() == ["bench", "--bench", "arenas_alloc", "--bench", "arenas_read"]


def test_unzip_round_trip(tmp_path):
    archive = _make_zip(tmp_path / "sample.zip")
    out = tmp_path / "out"
    count = unzip(archive, out)
    with zipfile.ZipFile(archive) as opened:
        assert count == len(opened.infolist())
    assert (out / "root" / "a.txt").read_text() == "alpha"
    assert (out / "root" / "sub" / "b.txt").read_text() == "beta"


def test_unzip_rejects_non_zip(tmp_path):
    bad = tmp_path / "bad.zip"
    bad.write_bytes(b"not a zip")
    with pytest.raises(zipfile.BadZipFile):
        unzip(bad, tmp_path / "out")


def test_download_file_copies_content(tmp_path):
    source = tmp_path / "source.bin"
    source.write_bytes(b"payload")
    target = tmp_path / "target.bin"
    download_file(source.as_uri(), target)
    assert target.read_bytes() == b"payload"


def test_download_file_missing_source(tmp_path):
    with pytest.raises(OSError):
        download_file((tmp_path / "missing.bin").as_uri(), tmp_path / "target.bin")


def test_run_with_existing_samples_only_runs_benchmarks(tmp_path):
    sample = tmp_path / "tmp.sample"
    sample.mkdir()
    (sample / "file").write_text("x")
    with mock.patch("spacekit.benchmark.subprocess.run", side_effect=_ok) as run:
        BenchmarkCommand(bench_names=["x"], working_dir=tmp_path).run()
    assert run.call_args.args[0] == ["cargo", "bench", "--bench", "x"]
    assert not (tmp_path / "tmp.sample.zip").exists()


def test_run_downloads_and_extracts_samples(tmp_path):
    work = tmp_path / "work"
    work.mkdir()
    source = _make_zip(tmp_path / "remote.zip")
    with mock.patch("spacekit.benchmark.subprocess.run", side_effect=_ok) as run:
        BenchmarkCommand(sample_url=source.as_uri(), working_dir=work).run()
    assert (work / "tmp.sample.zip").read_bytes() == source.read_bytes()
    assert (work / "tmp.sample" / "root" / "a.txt").read_text() == "alpha"
    assert run.call_args.args[0] == ["cargo", "bench"]


def test_run_without_samples_or_url_fails(tmp_path):
    with mock.patch("spacekit.benchmark.subprocess.run", side_effect=_ok) as run:
        with pytest.raises(ValueError):
            BenchmarkCommand(working_dir=tmp_path).run()
    assert run.call_count == 0