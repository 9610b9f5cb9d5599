"""Pack sprite images into a single power-of-two texture atlas."""
from .errors import (
    AtlasError,
    CapacityExceededError,
    InvalidOptionsError,
    InvalidSpriteError,
    NoInputFoundError,
    UnreadableImageError,
)
from .formats import AtlasFormat
from .generator import AtlasGenerator, AtlasOptions, AtlasResult, generate_atlas
from .images import ResizeFilter, ResizeMode
from .manifest import Manifest, reorder_from_manifest
from .packer import AtlasPacker, PackingAlgorithm, PackResult, next_power_of_two
from .sprite import Placement, Sprite

__version__ = "1.0.0"
