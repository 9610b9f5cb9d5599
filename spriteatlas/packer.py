import enum
import math
from typing import List, NamedTuple, Optional, Sequence

from .errors import CapacityExceededError, InvalidSpriteError
from .sprite import Placement, Sprite


class PackingAlgorithm(enum.Enum):
    """Enum for packing algorithms."""
    ROWS = 1        # Shelf rows, sprites sorted tallest first
    FIXED_GRID = 2  # Every sprite snapped to whole grid cells


class PackResult(NamedTuple):
    placements: List[Placement]
    width: int
    height: int


def next_power_of_two(n: int) -> int:
    """Return the next power of two greater than or equal to n."""
    if n <= 0:
        return 1
    return 1 << (n - 1).bit_length()


class AtlasPacker:
    """Lays out sprites on a single power-of-two atlas.

    Without ``grid_size`` sprites are packed in rows; with it every sprite is
    centred in a block of whole grid cells. ``stable_order`` sorts by key
    instead of by size so the layout only depends on the set of keys, and
    ``presorted`` keeps the caller's order as-is.

    The packer holds no state between calls. A ``CapacityExceededError`` from
    ``pack`` means nothing was placed.
    """

    def __init__(self, padding: int = 2, max_size: int = 2048, grid_size: Optional[int] = None,
                 stable_order: bool = False, presorted: bool = False):
        if max_size <= 0 or max_size & (max_size - 1):
            raise ValueError(f"max_size must be a power of 2, got {max_size}")
        self.padding = padding
        self.max_size = max_size
        self.grid_size = grid_size
        self.stable_order = stable_order
        self.presorted = presorted

    @property
    def algorithm(self) -> PackingAlgorithm:
        if self.grid_size:
            return PackingAlgorithm.FIXED_GRID
        return PackingAlgorithm.ROWS

    def pack(self, sprites: Sequence[Sprite]) -> PackResult:
        """Pack sprites and return their placements plus the atlas dimensions."""
        if not sprites:
            return PackResult([], 0, 0)

        for sprite in sprites:
            if sprite.width < 1 or sprite.height < 1:
                raise InvalidSpriteError(
                    f"Sprite {sprite.key} has invalid dimensions {sprite.width}×{sprite.height}"
                )

        if self.algorithm == PackingAlgorithm.FIXED_GRID:
            return self._pack_fixed_grid(sprites)
        return self._pack_rows(sprites)

    def _ordered(self, sprites: Sequence[Sprite], size_key) -> List[Sprite]:
        if self.presorted:
            return list(sprites)
        if self.stable_order:
            return sorted(sprites, key=lambda s: s.key)
        # sorted() is stable, so equal sizes keep their input order
        return sorted(sprites, key=size_key, reverse=True)

    def _row_error(self) -> CapacityExceededError:
        return CapacityExceededError(
            f"Cannot fit all sprites in atlas. Maximum size: {self.max_size}x{self.max_size}. "
            f"Consider increasing max size or reducing the number of sprites.",
            self.max_size,
        )

    def _grid_error(self) -> CapacityExceededError:
        return CapacityExceededError(
            f"Cannot fit all sprites in atlas with grid size {self.grid_size}. "
            f"Maximum size: {self.max_size}x{self.max_size}. "
            f"Consider increasing max size, reducing grid size, or reducing sprite count.",
            self.max_size,
            self.grid_size,
        )

    def _pack_rows(self, sprites: Sequence[Sprite]) -> PackResult:
        ordered = self._ordered(sprites, lambda s: s.height)

        placements = []
        current_x = self.padding
        current_y = self.padding
        row_height = 0
        max_width = 0
        max_height = 0

        for sprite in ordered:
            sprite_width = sprite.width + self.padding
            sprite_height = sprite.height + self.padding

            # Start a new row when the sprite runs off the right edge
            if current_x + sprite_width > self.max_size:
                current_x = self.padding
                current_y += row_height
                row_height = 0
                if current_x + sprite_width > self.max_size:
                    raise self._row_error()

            if current_y + sprite_height > self.max_size:
                raise self._row_error()

            placements.append(Placement(sprite, current_x, current_y))

            max_width = max(max_width, current_x + sprite_width)
            max_height = max(max_height, current_y + sprite_height)
            row_height = max(row_height, sprite_height)
            current_x += sprite_width

        width = min(next_power_of_two(max_width), self.max_size)
        height = min(next_power_of_two(max_height), self.max_size)
        return PackResult(placements, width, height)

    def _pack_fixed_grid(self, sprites: Sequence[Sprite]) -> PackResult:
        grid_size = self.grid_size
        ordered = self._ordered(sprites, lambda s: s.area())

        placements = []
        current_x = 0
        current_y = 0
        row_height = 0
        max_width = 0
        max_height = 0

        for sprite in ordered:
            cells_wide = math.ceil((sprite.width + self.padding) / grid_size)
            cells_high = math.ceil((sprite.height + self.padding) / grid_size)
            cell_width = cells_wide * grid_size
            cell_height = cells_high * grid_size

            if current_x + cell_width > self.max_size:
                current_x = 0
                current_y += row_height
                row_height = 0
                if cell_width > self.max_size:
                    raise self._grid_error()

            if current_y + cell_height > self.max_size:
                raise self._grid_error()

            # Centre the sprite inside its block of cells
            offset_x = (cell_width - sprite.width) // 2
            offset_y = (cell_height - sprite.height) // 2
            placements.append(Placement(
                sprite,
                current_x + offset_x,
                current_y + offset_y,
                grid_x=current_x // grid_size,
                grid_y=current_y // grid_size,
                grid_cells_wide=cells_wide,
                grid_cells_high=cells_high,
            ))

            max_width = max(max_width, current_x + cell_width)
            max_height = max(max_height, current_y + cell_height)
            row_height = max(row_height, cell_height)
            current_x += cell_width

        aligned_width = math.ceil(max_width / grid_size) * grid_size
        aligned_height = math.ceil(max_height / grid_size) * grid_size
        width = min(next_power_of_two(aligned_width), self.max_size)
        height = min(next_power_of_two(aligned_height), self.max_size)
        return PackResult(placements, width, height)

    def calculate_required_area(self, sprites: Sequence[Sprite]) -> int:
        """Sum of padded sprite areas. A lower bound: row and grid waste is not counted."""
        return sum((s.width + self.padding) * (s.height + self.padding) for s in sprites)

    def can_fit(self, sprites: Sequence[Sprite]) -> bool:
        """Cheap pre-check before packing.

        False means the sprites certainly do not fit. True does not guarantee
        that ``pack`` succeeds, since row and grid quantization waste space.
        """
        if self.calculate_required_area(sprites) > self.max_size * self.max_size:
            return False

        for sprite in sprites:
            if sprite.width > self.max_size or sprite.height > self.max_size:
                return False

        return True
