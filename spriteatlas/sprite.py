from typing import Any, Optional, Tuple


class Sprite:
    """A single input image to be placed into the atlas.

    ``image`` is an opaque payload carried through packing untouched; the
    pipeline stores a Pillow image there. ``width`` and ``height`` are the
    dimensions after any resizing or trimming has been applied.
    """
    def __init__(self, key: str, width: int, height: int, image: Any = None, path: str = "",
                 trim_offset: Optional[Tuple[int, int]] = None,
                 original_size: Optional[Tuple[int, int]] = None):
        self.key = key
        self.width = width
        self.height = height
        self.image = image
        self.path = path
        self.trim_offset = trim_offset  # (x, y) of the kept region in the source image
        self.original_size = original_size  # (w, h) before trimming

    def __repr__(self):
        return f"Sprite({self.width}×{self.height} - {self.key})"

    @property
    def trimmed(self) -> bool:
        return self.original_size is not None

    def area(self) -> int:
        """Get the area of the sprite."""
        return self.width * self.height


class Placement(Sprite):
    """A sprite with its top-left position in the atlas.

    Grid fields are only set when the fixed-grid layout produced the placement.
    """
    def __init__(self, sprite: Sprite, x: int, y: int,
                 grid_x: Optional[int] = None, grid_y: Optional[int] = None,
                 grid_cells_wide: Optional[int] = None, grid_cells_high: Optional[int] = None):
        super().__init__(sprite.key, sprite.width, sprite.height, sprite.image, sprite.path,
                         sprite.trim_offset, sprite.original_size)
        self.x = x
        self.y = y
        self.grid_x = grid_x
        self.grid_y = grid_y
        self.grid_cells_wide = grid_cells_wide
        self.grid_cells_high = grid_cells_high

    def __repr__(self):
        grid = f" cell ({self.grid_x},{self.grid_y})" if self.has_grid else ""
        return f"Placement({self.width}×{self.height} at ({self.x},{self.y}){grid} - {self.key})"

    @property
    def has_grid(self) -> bool:
        return self.grid_x is not None and self.grid_y is not None

    def padded_box(self, padding: int = 0) -> Tuple[int, int, int, int]:
        """Return (left, top, right, bottom) with padding added on the right and bottom."""
        return self.x, self.y, self.x + self.width + padding, self.y + self.height + padding

    def intersects(self, other: 'Placement', padding: int = 0) -> bool:
        """Check if the padded boxes of two placements intersect."""
        left, top, right, bottom = self.padded_box(padding)
        o_left, o_top, o_right, o_bottom = other.padded_box(padding)
        return not (
            right <= o_left or
            bottom <= o_top or
            left >= o_right or
            top >= o_bottom
        )
