import pytest
from loguru import logger

from cbtu.core.predicates import base_name, is_comic, is_image, split_name, target_name_for


@pytest.mark.parametrize("name", ["a.jpg", "A.JPG", "b.Jpeg", "c.png", "d.WEBP", "e.bmp", "f.GIF", "g.tga"])
def test_is_image_accepts_page_formats(name):
    assert is_image(name)


@pytest.mark.parametrize("name", ["notes.txt", "cover.jpg.txt", "jpg", "archive.zip", "image.tiff"])
def test_is_image_rejects_other_extensions(name):
    assert not is_image(name)


def test_is_image_ignores_case_and_directories():
    assert is_image("A.JPG") == is_image("a.jpg")
    assert is_image("chapter 1/012.PNG")
    assert is_image("chapter.1\\012.png")


def test_rare_formats_are_logged():
    messages = []
    logger.add(messages.append, level="DEBUG", format="{level}|{message}")

    assert is_image("scan-01.gif")
    assert is_image("scan-02.jpg")

    assert any(message.startswith("DEBUG|") and "scan-01.gif" in message for message in messages)
    assert not any("scan-02.jpg" in message for message in messages)


@pytest.mark.parametrize("name", ["x.cbr", "x.CBZ", "x.cbt", "x.rar", "x.Zip", "x.tar"])
def test_is_comic(name):
    assert is_comic(name)


@pytest.mark.parametrize("name", ["x.7z", "x.pdf", "x.tar.gz", "cbz"])
def test_is_comic_rejects_other_files(name):
    assert not is_comic(name)


def test_name_helpers():
    assert base_name("a/b/c.jpg") == "c.jpg"
    assert split_name("vol.01.cbz") == ("vol.01", ".cbz")
    assert split_name(".jpg") == ("", ".jpg")
    assert split_name("README") == ("README", "")
    assert target_name_for("/data/Vol.01.cbz") == "Vol.01.cbt"
    assert target_name_for("book") == "book.cbt"
