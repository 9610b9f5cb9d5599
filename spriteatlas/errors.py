from typing import Optional


class AtlasError(Exception):
    """Base class for all atlas generation failures."""


class CapacityExceededError(AtlasError):
    """Raised when the sprites cannot be laid out within the maximum atlas size."""
    def __init__(self, message: str, max_size: int, grid_size: Optional[int] = None):
        super().__init__(message)
        self.max_size = max_size
        self.grid_size = grid_size


class InvalidSpriteError(AtlasError, ValueError):
    """Raised for sprites with non-positive dimensions."""


class NoInputFoundError(AtlasError):
    """Raised when sprite discovery yields nothing to pack."""
    def __init__(self, pattern: str):
        super().__init__(f"No images found matching pattern: {pattern}")
        self.pattern = pattern


class UnreadableImageError(AtlasError):
    """Raised when a single sprite file cannot be decoded."""
    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class InvalidOptionsError(AtlasError, ValueError):
    """Raised when atlas options are rejected before packing begins."""
