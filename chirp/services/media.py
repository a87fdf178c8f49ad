"""
Attachment store: validates image files and keeps copies under MEDIA_DIR.
"""
import hashlib
import os
import shutil
from dataclasses import dataclass
from typing import List, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from chirp import config
from chirp.errors import InvalidAttachmentError

# Pillow format name -> MIME type
ALLOWED_FORMATS = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "GIF": "image/gif",
}


@dataclass
class ImageInfo:
    """What the validator learned about an image file."""
    path: str
    file_type: str
    file_size: int
    width: int
    height: int


def validate_image(path: str, max_bytes: Optional[int] = None) -> ImageInfo:
    """
    Check that a file is a non-empty JPEG, PNG or GIF under the size ceiling.

    Args:
        path: Source file path
        max_bytes: Size ceiling (defaults to MAX_IMAGE_BYTES)

    Returns:
        ImageInfo for the file

    Raises:
        InvalidAttachmentError: if any check fails
    """
    max_bytes = config.MAX_IMAGE_BYTES if max_bytes is None else max_bytes

    if not os.path.isfile(path):
        raise InvalidAttachmentError(f"{path}: file not found")
    size = os.path.getsize(path)
    if size == 0:
        raise InvalidAttachmentError(f"{path}: file is empty")
    if size > max_bytes:
        raise InvalidAttachmentError(f"{path}: image too large (max {max_bytes // (1024 * 1024)}MB)")

    try:
        with Image.open(path) as img:
            fmt = img.format
            width, height = img.size
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise InvalidAttachmentError(f"{path}: not a valid image file") from exc

    if fmt not in ALLOWED_FORMATS:
        raise InvalidAttachmentError(f"{path}: unsupported image format {fmt} (only JPEG, PNG, GIF allowed)")

    return ImageInfo(path=path, file_type=ALLOWED_FORMATS[fmt], file_size=size, width=width, height=height)


def validate_images(paths: List[str]) -> List[ImageInfo]:
    if len(paths) > config.MAX_IMAGES_PER_POST:
        raise InvalidAttachmentError(f"too many images (max {config.MAX_IMAGES_PER_POST})")
    return [validate_image(path) for path in paths]


def _content_hash(path: str) -> str:
    digest = hashlib.sha256()
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()[:8]


def store_image(source_path: str, post_id: str, position: int, media_dir: Optional[str] = None) -> Tuple[str, str]:
    """
    Copy a validated image into the media directory.

    The stored name is ``<post_id>_<position>_<hash8><ext>`` so two posts can
    attach the same file without clobbering each other.

    Returns:
        (destination path, file name)
    """
    media_dir = media_dir or config.MEDIA_DIR
    os.makedirs(media_dir, exist_ok=True)

    ext = os.path.splitext(source_path)[1].lower() or ".jpg"
    file_name = f"{post_id}_{position}_{_content_hash(source_path)}{ext}"
    dest_path = os.path.join(media_dir, file_name)
    shutil.copyfile(source_path, dest_path)
    return dest_path, file_name


def delete_stored_file(file_path: str, media_dir: Optional[str] = None) -> None:
    """
    Remove a stored media file.

    Raises:
        OSError: if the file is outside the media directory or cannot be removed
    """
    if not file_path:
        return
    media_dir = os.path.abspath(media_dir or config.MEDIA_DIR)
    target = os.path.abspath(file_path)
    if os.path.commonpath([media_dir, target]) != media_dir:
        raise OSError(f"{file_path} is not in the media directory")
    os.remove(target)
