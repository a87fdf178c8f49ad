# tests/test_media.py
"""Tests for the attachment store."""

import os

import pytest

from chirp import config
from chirp.errors import InvalidAttachmentError
from chirp.services import media


def test_validate_reports_format_and_size(make_image):
    info = media.validate_image(make_image("gif.gif", fmt="GIF", size=(3, 5)))

    assert info.file_type == "image/gif"
    assert (info.width, info.height) == (3, 5)
    assert info.file_size == os.path.getsize(info.path)


def test_size_ceiling(make_image):
    path = make_image()
    with pytest.raises(InvalidAttachmentError, match="too large"):
        media.validate_image(path, max_bytes=os.path.getsize(path) - 1)


def test_empty_file(tmp_path):
    empty = tmp_path / "empty.png"
    empty.write_bytes(b"")
    with pytest.raises(InvalidAttachmentError, match="empty"):
        media.validate_image(str(empty))


def test_same_file_on_two_posts_does_not_collide(make_image):
    path = make_image()

    first, _ = media.store_image(path, "POST1", 0)
    second, _ = media.store_image(path, "POST2", 0)

    assert first != second
    assert os.path.isfile(first) and os.path.isfile(second)


def test_delete_refuses_paths_outside_media_dir(tmp_path, make_image):
    outside = make_image("outside.png")

    with pytest.raises(OSError):
        media.delete_stored_file(outside)
    assert os.path.exists(outside)


def test_delete_stored_file(make_image):
    stored, _ = media.store_image(make_image(), "POST1", 0)
    assert os.path.dirname(stored) == config.MEDIA_DIR

    media.delete_stored_file(stored)

    assert not os.path.exists(stored)
