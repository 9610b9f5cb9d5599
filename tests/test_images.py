"""Tests for the Pillow helpers: loading, resizing, trimming, compositing."""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from spriteatlas.errors import UnreadableImageError
from spriteatlas.images import ResizeFilter, ResizeMode, compose_atlas, load_sprite, resize_sprite, trim_sprite
from spriteatlas.sprite import Placement, Sprite

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


def solid(width: int, height: int, color=RED) -> Image.Image:
    return Image.new("RGBA", (width, height), color)


def sprite_of(img: Image.Image, key: str = "s.png") -> Sprite:
    return Sprite(key, img.width, img.height, image=img, path=key)


class TestLoadSprite:
    def test_loads_png_as_rgba(self, tmp_path: Path) -> None:
        path = tmp_path / "hero.png"
        Image.new("RGB", (12, 7), (10, 20, 30)).save(path)

        sprite = load_sprite(str(path), "hero.png")

        assert (sprite.key, sprite.width, sprite.height) == ("hero.png", 12, 7)
        assert sprite.image.mode == "RGBA"
        assert sprite.path == str(path)
        assert not sprite.trimmed

    def test_unreadable_file(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.png"
        path.write_bytes(b"not an image")

        with pytest.raises(UnreadableImageError) as excinfo:
            load_sprite(str(path), "broken.png")

        assert excinfo.value.path == str(path)


class TestResizeSprite:
    @pytest.mark.parametrize("mode", list(ResizeMode))
    @pytest.mark.parametrize("resample_filter", list(ResizeFilter))
    def test_output_is_square_target(self, mode: ResizeMode, resample_filter: ResizeFilter) -> None:
        resized = resize_sprite(sprite_of(solid(40, 20)), 16, mode, resample_filter)

        assert (resized.width, resized.height) == (16, 16)
        assert resized.image.size == (16, 16)
        assert resized.key == "s.png"

    def test_contain_letterboxes_with_transparency(self) -> None:
        resized = resize_sprite(sprite_of(solid(40, 20)), 16, ResizeMode.CONTAIN, ResizeFilter.NEAREST)

        assert resized.image.getpixel((8, 0))[3] == 0
        assert resized.image.getpixel((8, 8)) == RED

    def test_cover_fills_target(self) -> None:
        resized = resize_sprite(sprite_of(solid(40, 20)), 16, ResizeMode.COVER, ResizeFilter.NEAREST)

        assert resized.image.getpixel((8, 0)) == RED
        assert resized.image.getchannel("A").getbbox() == (0, 0, 16, 16)


class TestTrimSprite:
    def test_trims_transparent_border(self) -> None:
        img = Image.new("RGBA", (20, 10), (0, 0, 0, 0))
        img.paste(solid(5, 4), (3, 2))

        trimmed = trim_sprite(sprite_of(img))

        assert (trimmed.width, trimmed.height) == (5, 4)
        assert trimmed.trimmed
        assert trimmed.trim_offset == (3, 2)
        assert trimmed.original_size == (20, 10)
        assert trimmed.image.size == (5, 4)

    def test_opaque_sprite_unchanged(self) -> None:
        sprite = sprite_of(solid(6, 6))
        assert trim_sprite(sprite) is sprite

    def test_fully_transparent_sprite_unchanged(self) -> None:
        sprite = sprite_of(Image.new("RGBA", (6, 6), (0, 0, 0, 0)))
        assert trim_sprite(sprite) is sprite


class TestComposeAtlas:
    def test_pastes_at_placements(self) -> None:
        placements = [
            Placement(sprite_of(solid(4, 4, RED), "a"), 2, 2),
            Placement(sprite_of(solid(4, 4, BLUE), "b"), 8, 2),
        ]

        sheet = compose_atlas(placements, 16, 8)

        assert sheet.size == (16, 8)
        assert sheet.mode == "RGBA"
        assert sheet.getpixel((0, 0)) == (0, 0, 0, 0)
        assert sheet.getpixel((3, 3)) == RED
        assert sheet.getpixel((9, 3)) == BLUE
        assert sheet.getpixel((7, 3)) == (0, 0, 0, 0)
