import tarfile

import pytest

from cbtu.core.batch import (
    STATUS_CONVERTED,
    STATUS_ERROR,
    STATUS_EXISTS,
    convert,
    convert_file,
    convert_tree,
    discover_jobs,
)
from cbtu.core.config import RepackConfig


@pytest.fixture
def library(tmp_path, make_zip, pages):
    """A small comic library with one damaged archive and one unrelated file."""
    src = tmp_path / "library"
    (src / "a" / "b").mkdir(parents=True)
    (src / "empty").mkdir()
    make_zip(src / "a" / "book1.cbz", pages)
    make_zip(src / "a" / "b" / "book2.zip", pages[:2])
    (src / "broken.cbr").write_bytes(b"not a rar archive")
    (src / "notes.txt").write_text("hello")
    return src


def test_discover_jobs_mirrors_tree(library, tmp_path):
    out = tmp_path / "out"

    jobs = discover_jobs(str(library), str(out))

    assert jobs == [
        (str(library / "broken.cbr"), str(out)),
        (str(library / "a" / "book1.cbz"), str(out / "a")),
        (str(library / "a" / "b" / "book2.zip"), str(out / "a" / "b")),
    ]
    assert (out / "a" / "b").is_dir()
    assert (out / "empty").is_dir()


def test_tree_mode_continues_past_broken_archive(library, tmp_path):
    out = tmp_path / "out"

    outcomes = convert(library, out)

    assert [outcome.status for outcome in outcomes] == [STATUS_ERROR, STATUS_CONVERTED, STATUS_CONVERTED]
    assert outcomes[0].source_path == str(library / "broken.cbr")
    assert not (out / "notes.cbt").exists()

    with tarfile.open(out / "a" / "book1.cbt") as tf:
        assert tf.getnames() == ["001.jpg", "002.jpg", "003.jpg"]
    assert (out / "a" / "book1_ad.jpg").exists()
    with tarfile.open(out / "a" / "b" / "book2.cbt") as tf:
        assert tf.getnames() == ["001.jpg", "002.jpg"]


def test_tree_mode_reports_existing_targets(library, tmp_path):
    out = tmp_path / "out"
    (out / "a").mkdir(parents=True)
    (out / "a" / "book1.cbt").write_bytes(b"old")

    outcomes = convert_tree(library, out)

    statuses = {outcome.source_path: outcome.status for outcome in outcomes}
    assert statuses[str(library / "a" / "book1.cbz")] == STATUS_EXISTS
    assert statuses[str(library / "a" / "b" / "book2.zip")] == STATUS_CONVERTED
    assert (out / "a" / "book1.cbt").read_bytes() == b"old"


def test_parallel_workers_keep_walk_order(library, tmp_path):
    sequential = convert_tree(library, tmp_path / "seq")
    parallel = convert_tree(library, tmp_path / "par", RepackConfig(workers=3))

    assert [o.source_path for o in parallel] == [o.source_path for o in sequential]
    assert [o.status for o in parallel] == [o.status for o in sequential]
    assert (tmp_path / "par" / "a" / "b" / "book2.cbt").exists()


def test_empty_tree(tmp_path):
    (tmp_path / "src").mkdir()
    assert convert_tree(tmp_path / "src", tmp_path / "out") == []
    assert (tmp_path / "out").is_dir()


def test_mirror_failure_aborts(library, tmp_path, monkeypatch):
    def deny(path, exist_ok=False):
        raise PermissionError(f"denied: {path}")

    monkeypatch.setattr("cbtu.core.batch.os.makedirs", deny)

    with pytest.raises(PermissionError):
        convert_tree(library, tmp_path / "out")


def test_convert_file_wraps_open_failure(tmp_path):
    outcome = convert_file(str(tmp_path / "gone.cbz"), str(tmp_path))

    assert outcome.status == STATUS_ERROR
    assert outcome.target_path == str(tmp_path / "gone.cbt")
    assert outcome.result is None


def test_single_file_defaults_to_source_directory(tmp_path, make_zip, pages):
    source = make_zip(tmp_path / "Book.cbz", pages)

    outcomes = convert(source)

    assert len(outcomes) == 1
    assert outcomes[0].status == STATUS_CONVERTED
    assert outcomes[0].target_path == str(tmp_path / "Book.cbt")
    assert outcomes[0].result.excluded == ["ad.jpg"]


def test_single_file_creates_destination(tmp_path, make_zip, pages):
    source = make_zip(tmp_path / "Book.cbz", pages)
    dest = tmp_path / "x" / "y"

    convert(source, dest)

    assert (dest / "Book.cbt").exists()


def test_single_file_errors_propagate(tmp_path, make_zip, pages):
    source = make_zip(tmp_path / "Book.cbz", pages)
    (tmp_path / "Book.cbt").write_bytes(b"old")

    with pytest.raises(FileExistsError):
        convert(source)


def test_invalid_source_is_fatal(tmp_path):
    with pytest.raises(FileNotFoundError):
        convert(tmp_path / "nowhere")
