import io
import tarfile
import zipfile
from datetime import datetime, timedelta

import pytest
from loguru import logger

BASE_TIME = datetime(2024, 3, 1, 12, 0, 0)


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger.remove()


@pytest.fixture
def make_zip():
    """Build a zip archive from ``(name, data, datetime | None)`` tuples."""

    def _make_zip(path, entries):
        with zipfile.ZipFile(path, "w") as zf:
            for name, data, when in entries:
                when = when or BASE_TIME
                info = zipfile.ZipInfo(name, date_time=when.timetuple()[:6])
                if name.endswith("/"):
                    zf.writestr(info, b"")
                else:
                    zf.writestr(info, data)
        return path

    return _make_zip


@pytest.fixture
def make_tar():
    def _make_tar(path, entries):
        with tarfile.open(path, "w") as tf:
            for name, data, when in entries:
                info = tarfile.TarInfo(name)
                info.size = len(data)
                info.mtime = int((when or BASE_TIME).timestamp())
                tf.addfile(info, io.BytesIO(data))
        return path

    return _make_tar


@pytest.fixture
def pages():
    """Three numbered pages one minute apart plus an ad between them."""
    return [
        ("001.jpg", b"page-1", BASE_TIME),
        ("002.jpg", b"page-2", BASE_TIME + timedelta(minutes=1)),
        ("ad.jpg", b"advert", BASE_TIME + timedelta(minutes=2)),
        ("003.jpg", b"page-3", BASE_TIME + timedelta(minutes=3)),
    ]
