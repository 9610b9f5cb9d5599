"""Pillow side of the pipeline: loading, resizing, trimming and compositing."""
import enum
from typing import Sequence

from PIL import Image, ImageOps

from .errors import UnreadableImageError
from .sprite import Placement, Sprite

IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg')


class ResizeMode(enum.Enum):
    """How a sprite is fitted into a square resize target."""
    CONTAIN = "contain"  # Keep aspect ratio, letterbox with transparency
    COVER = "cover"      # Keep aspect ratio, crop the overflow
    STRETCH = "stretch"  # Ignore aspect ratio


class ResizeFilter(enum.Enum):
    """Resampling filter used when resizing sprites."""
    LANCZOS = "lanczos"
    NEAREST = "nearest"
    LINEAR = "linear"


RESAMPLING = {
    ResizeFilter.LANCZOS: Image.Resampling.LANCZOS,
    ResizeFilter.NEAREST: Image.Resampling.NEAREST,
    ResizeFilter.LINEAR: Image.Resampling.BICUBIC,
}


def load_sprite(path: str, key: str) -> Sprite:
    """Decode an image file into an RGBA sprite."""
    try:
        with Image.open(path) as img:
            img.load()
            rgba = img.convert('RGBA')
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise UnreadableImageError(path, str(e)) from e

    if rgba.width == 0 or rgba.height == 0:
        raise UnreadableImageError(path, "unable to read dimensions")

    return Sprite(key, rgba.width, rgba.height, image=rgba, path=path)


def resize_sprite(sprite: Sprite, target_size: int, mode: ResizeMode = ResizeMode.CONTAIN,
                  resample_filter: ResizeFilter = ResizeFilter.LANCZOS) -> Sprite:
    """Resize a sprite to exactly target_size × target_size."""
    size = (target_size, target_size)
    method = RESAMPLING[resample_filter]
    img = sprite.image

    if mode == ResizeMode.CONTAIN:
        resized = ImageOps.pad(img, size, method=method, color=(0, 0, 0, 0), centering=(0.5, 0.5))
    elif mode == ResizeMode.COVER:
        resized = ImageOps.fit(img, size, method=method, centering=(0.5, 0.5))
    else:
        resized = img.resize(size, method)

    return Sprite(sprite.key, resized.width, resized.height, image=resized, path=sprite.path)


def trim_sprite(sprite: Sprite) -> Sprite:
    """
    Trim transparent borders from a sprite.
    The sprite is returned unchanged when there is nothing to trim or it is
    entirely transparent.
    """
    img = sprite.image
    if img.mode != 'RGBA':
        img = img.convert('RGBA')

    # Bounding box of non-transparent pixels
    bbox = img.getchannel('A').getbbox()
    if bbox is None:
        return sprite

    left, top, right, bottom = bbox
    width = right - left
    height = bottom - top
    if width == sprite.width and height == sprite.height:
        return sprite

    return Sprite(
        sprite.key,
        width,
        height,
        image=img.crop(bbox),
        path=sprite.path,
        trim_offset=(left, top),
        original_size=(sprite.width, sprite.height),
    )


def compose_atlas(placements: Sequence[Placement], width: int, height: int) -> Image.Image:
    """Paste every placed sprite onto a transparent canvas."""
    sheet_img = Image.new('RGBA', (width, height), (0, 0, 0, 0))
    for placement in placements:
        sheet_img.paste(placement.image, (placement.x, placement.y))
    return sheet_img
