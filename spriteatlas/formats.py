"""Atlas metadata in Phaser 3 (hash / array) and Tiled tileset layouts."""
import enum
import json
import os
from typing import Dict, List, Optional, Sequence

from .sprite import Placement

ROW_TOLERANCE = 5  # pixels; placements this close to the first row's y count as the first row


class AtlasFormat(enum.Enum):
    """Enum for metadata output formats."""
    PHASER3_HASH = "phaser3-hash"
    PHASER3_ARRAY = "phaser3-array"
    TILED = "tiled"


def atlas_json_path(output: str, fmt: AtlasFormat) -> str:
    """Tiled tilesets use the .tsj extension, everything else .json."""
    if fmt == AtlasFormat.TILED:
        return f"{output}.tsj"
    return f"{output}.json"


def frame_record(placement: Placement, grid_metadata: bool = False) -> Dict:
    """Build the Phaser frame entry for one placement."""
    if placement.trimmed:
        source_w, source_h = placement.original_size
        trim_x, trim_y = placement.trim_offset
    else:
        source_w, source_h = placement.width, placement.height
        trim_x, trim_y = 0, 0

    record = {
        "frame": {"x": placement.x, "y": placement.y, "w": placement.width, "h": placement.height},
        "rotated": False,
        "trimmed": placement.trimmed,
        "spriteSourceSize": {"x": trim_x, "y": trim_y, "w": placement.width, "h": placement.height},
        "sourceSize": {"w": source_w, "h": source_h},
    }

    if grid_metadata and placement.has_grid:
        record["grid"] = {
            "x": placement.grid_x,
            "y": placement.grid_y,
            "cellWidth": placement.grid_cells_wide or 1,
            "cellHeight": placement.grid_cells_high or 1,
        }

    return record


def _meta(image_name: str, width: int, height: int, scale: float) -> Dict:
    return {
        "image": image_name,
        "format": "RGBA8888",
        "size": {"w": width, "h": height},
        "scale": scale,
    }


def build_phaser_hash(placements: Sequence[Placement], width: int, height: int, image_name: str,
                      scale: float = 1, grid_metadata: bool = False) -> Dict:
    return {
        "frames": {p.key: frame_record(p, grid_metadata) for p in placements},
        "meta": _meta(image_name, width, height, scale),
    }


def build_phaser_array(placements: Sequence[Placement], width: int, height: int, image_name: str,
                       scale: float = 1, grid_metadata: bool = False) -> Dict:
    frames = []
    for p in placements:
        record = {"filename": p.key}
        record.update(frame_record(p, grid_metadata))
        frames.append(record)

    return {
        "frames": frames,
        "meta": _meta(image_name, width, height, scale),
    }


def calculate_tiled_columns(placements: Sequence[Placement]) -> int:
    """Count the placements sharing the first placement's row."""
    if not placements:
        return 0

    first_row_y = placements[0].y
    first_row = [p for p in placements if abs(p.y - first_row_y) <= ROW_TOLERANCE]
    return max(1, len(first_row))


def build_tiled(placements: Sequence[Placement], width: int, height: int, image_name: str,
                grid_size: Optional[int] = None, spacing: int = 0) -> Dict:
    """Build a Tiled tileset; tile ids follow placement order."""
    if grid_size:
        tile_width = tile_height = grid_size
        columns = width // grid_size
    elif placements:
        tile_width = placements[0].width
        tile_height = placements[0].height
        columns = calculate_tiled_columns(placements)
    else:
        tile_width = tile_height = columns = 0

    tiles: List[Dict] = []
    for index, p in enumerate(placements):
        tiles.append({
            "id": index,
            "type": p.key,
            "properties": [
                {"name": "filename", "type": "string", "value": p.key},
                {"name": "originalPath", "type": "string", "value": p.path},
            ],
        })

    return {
        "version": "1.10",
        "tiledversion": "1.10.0",
        "name": os.path.splitext(image_name)[0],
        "tilewidth": tile_width,
        "tileheight": tile_height,
        "tilecount": len(placements),
        "columns": columns,
        "image": image_name,
        "imagewidth": width,
        "imageheight": height,
        "margin": 0,
        "spacing": spacing,
        "tiles": tiles,
    }


def write_atlas_json(data: Dict, path: str):
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)
