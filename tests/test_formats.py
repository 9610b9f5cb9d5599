"""Tests for the Phaser and Tiled metadata builders."""

from __future__ import annotations

import json
from pathlib import Path

from spriteatlas.formats import (
    AtlasFormat,
    atlas_json_path,
    build_phaser_array,
    build_phaser_hash,
    build_tiled,
    calculate_tiled_columns,
    frame_record,
    write_atlas_json,
)
from spriteatlas.sprite import Placement, Sprite


def placed(key: str, x: int, y: int, w: int = 16, h: int = 16, **grid) -> Placement:
    return Placement(Sprite(key, w, h, path=f"assets/{key}"), x, y, **grid)


class TestFrameRecord:
    def test_untrimmed(self) -> None:
        record = frame_record(placed("a.png", 2, 4, 10, 12))

        assert record == {
            "frame": {"x": 2, "y": 4, "w": 10, "h": 12},
            "rotated": False,
            "trimmed": False,
            "spriteSourceSize": {"x": 0, "y": 0, "w": 10, "h": 12},
            "sourceSize": {"w": 10, "h": 12},
        }

    def test_trimmed(self) -> None:
        sprite = Sprite("a.png", 5, 4, trim_offset=(3, 2), original_size=(20, 10))
        record = frame_record(Placement(sprite, 0, 0))

        assert record["trimmed"] is True
        assert record["spriteSourceSize"] == {"x": 3, "y": 2, "w": 5, "h": 4}
        assert record["sourceSize"] == {"w": 20, "h": 10}

    def test_grid_metadata_only_when_requested(self) -> None:
        placement = placed("a.png", 6, 6, grid_x=1, grid_y=2, grid_cells_wide=2, grid_cells_high=1)

        assert "grid" not in frame_record(placement)
        assert frame_record(placement, grid_metadata=True)["grid"] == {
            "x": 1, "y": 2, "cellWidth": 2, "cellHeight": 1,
        }

    def test_grid_metadata_skipped_without_grid_layout(self) -> None:
        assert "grid" not in frame_record(placed("a.png", 0, 0), grid_metadata=True)


class TestPhaser:
    def test_hash(self) -> None:
        data = build_phaser_hash([placed("a.png", 2, 2), placed("dir/b.png", 20, 2)], 64, 32, "atlas.png", 2)

        assert set(data["frames"]) == {"a.png", "dir/b.png"}
        assert data["meta"] == {
            "image": "atlas.png",
            "format": "RGBA8888",
            "size": {"w": 64, "h": 32},
            "scale": 2,
        }

    def test_array_keeps_order_and_filename(self) -> None:
        data = build_phaser_array([placed("b.png", 2, 2), placed("a.png", 20, 2)], 64, 32, "atlas.png")

        assert [f["filename"] for f in data["frames"]] == ["b.png", "a.png"]
        assert data["frames"][1]["frame"]["x"] == 20
        assert data["meta"]["scale"] == 1


class TestTiled:
    def test_grid_tileset(self) -> None:
        placements = [placed("a.png", 8, 8, grid_x=0, grid_y=0), placed("b.png", 40, 8, grid_x=1, grid_y=0)]
        data = build_tiled(placements, 128, 32, "atlas.png", grid_size=32, spacing=2)

        assert data["tilewidth"] == data["tileheight"] == 32
        assert data["columns"] == 4
        assert data["tilecount"] == 2
        assert data["name"] == "atlas"
        assert data["spacing"] == 2
        assert (data["imagewidth"], data["imageheight"]) == (128, 32)
        assert data["tiles"][1] == {
            "id": 1,
            "type": "b.png",
            "properties": [
                {"name": "filename", "type": "string", "value": "b.png"},
                {"name": "originalPath", "type": "string", "value": "assets/b.png"},
            ],
        }

    def test_row_tileset_uses_first_sprite(self) -> None:
        placements = [placed("a.png", 2, 2, 16, 20), placed("b.png", 20, 4), placed("c.png", 2, 30)]
        data = build_tiled(placements, 64, 64, "atlas.png")

        assert (data["tilewidth"], data["tileheight"]) == (16, 20)
        assert data["columns"] == 2

    def test_columns_of_empty_layout(self) -> None:
        assert calculate_tiled_columns([]) == 0


def test_json_paths() -> None:
    assert atlas_json_path("out/atlas", AtlasFormat.PHASER3_HASH) == "out/atlas.json"
    assert atlas_json_path("out/atlas", AtlasFormat.PHASER3_ARRAY) == "out/atlas.json"
    assert atlas_json_path("out/atlas", AtlasFormat.TILED) == "out/atlas.tsj"


def test_write_atlas_json(tmp_path: Path) -> None:
    path = tmp_path / "atlas.json"
    write_atlas_json({"frames": {}}, str(path))

    assert json.loads(path.read_text(encoding="utf-8")) == {"frames": {}}
