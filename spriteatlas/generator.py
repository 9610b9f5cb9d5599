import glob
import os
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .errors import CapacityExceededError, InvalidOptionsError, NoInputFoundError, UnreadableImageError
from .formats import AtlasFormat, atlas_json_path, build_phaser_array, build_phaser_hash, build_tiled, write_atlas_json
from .images import IMAGE_EXTENSIONS, ResizeFilter, ResizeMode, compose_atlas, load_sprite, resize_sprite, trim_sprite
from .manifest import load_manifest, manifest_changes, manifest_path, reorder_from_manifest, save_manifest
from .packer import AtlasPacker
from .sprite import Placement, Sprite

WILDCARD = re.compile(r'[*?{\[]')


def is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


@dataclass
class AtlasOptions:
    """Configuration for one atlas build."""
    input: str
    output: str  # path without extension
    format: AtlasFormat = AtlasFormat.PHASER3_HASH
    max_size: int = 2048
    padding: int = 2
    spacing: int = 0
    trim: bool = False
    scale: float = 1.0  # written to the metadata only
    resize_to: Optional[int] = None
    resize_mode: ResizeMode = ResizeMode.CONTAIN
    resize_filter: ResizeFilter = ResizeFilter.LANCZOS
    grid_size: Optional[int] = None
    grid_metadata: bool = False
    stable_order: bool = False
    preserve_ids: bool = True

    def validate(self):
        # Accept plain strings from Python callers, e.g. format="phaser3-array"
        try:
            self.format = AtlasFormat(self.format)
            self.resize_mode = ResizeMode(self.resize_mode)
            self.resize_filter = ResizeFilter(self.resize_filter)
        except ValueError as e:
            raise InvalidOptionsError(str(e)) from e

        if not is_power_of_two(self.max_size):
            raise InvalidOptionsError(
                f"Max size must be a power of 2 (e.g., 512, 1024, 2048, 4096), got {self.max_size}"
            )
        if self.padding < 0 or self.spacing < 0:
            raise InvalidOptionsError("Padding and spacing must not be negative")
        if self.grid_size is not None and self.grid_size <= 0:
            raise InvalidOptionsError(f"Grid size must be positive, got {self.grid_size}")
        if self.resize_to is not None and self.resize_to <= 0:
            raise InvalidOptionsError(f"Resize target must be positive, got {self.resize_to}")
        if self.scale <= 0:
            raise InvalidOptionsError(f"Scale must be positive, got {self.scale}")

    @property
    def effective_padding(self) -> int:
        return self.padding + self.spacing

    @property
    def uses_manifest(self) -> bool:
        return self.stable_order and self.preserve_ids


@dataclass
class AtlasResult:
    """Result of atlas generation."""
    image_path: str
    json_path: str
    sprite_count: int
    width: int
    height: int


def _split_alternatives(body: str) -> List[str]:
    """Split a brace body on commas that are not inside nested braces."""
    parts = []
    depth = 0
    start = 0
    for i, ch in enumerate(body):
        if ch == '{':
            depth += 1
        elif ch == '}':
            depth -= 1
        elif ch == ',' and depth == 0:
            parts.append(body[start:i])
            start = i + 1
    parts.append(body[start:])
    return parts


def expand_braces(pattern: str) -> List[str]:
    """Expand shell-style {a,b} alternatives, which glob.glob does not support."""
    depth = 0
    start = 0
    for i, ch in enumerate(pattern):
        if ch == '{':
            if depth == 0:
                start = i
            depth += 1
        elif ch == '}' and depth:
            depth -= 1
            if depth:
                continue
            alternatives = _split_alternatives(pattern[start + 1:i])
            if len(alternatives) < 2:
                # "{x}" without a comma is literal
                continue
            prefix, suffix = pattern[:start], pattern[i + 1:]
            expanded = []
            for alternative in alternatives:
                for candidate in expand_braces(prefix + alternative + suffix):
                    if candidate not in expanded:
                        expanded.append(candidate)
            return expanded
    return [pattern]


def find_sprite_files(input_path: str) -> List[str]:
    """Expand a directory, single file or glob pattern into image files."""
    if os.path.isdir(input_path):
        pattern = os.path.join(glob.escape(input_path), '**', '*')
        files = [f for f in glob.glob(pattern, recursive=True) if f.lower().endswith(IMAGE_EXTENSIONS)]
    elif os.path.isfile(input_path):
        files = [input_path]
    else:
        files = set()
        for pattern in expand_braces(input_path):
            files.update(glob.glob(pattern, recursive=True))

    return sorted(f for f in files if os.path.isfile(f))


def get_base_path(input_path: str) -> str:
    """Directory that frame keys are made relative to."""
    match = WILDCARD.search(input_path)
    if match is None:
        if os.path.isfile(input_path):
            return os.path.dirname(os.path.abspath(input_path))
        return input_path

    before_wildcard = input_path[:match.start()]
    last_separator = max(before_wildcard.rfind('/'), before_wildcard.rfind('\\'))
    if last_separator == -1:
        return os.getcwd()
    return os.path.abspath(before_wildcard[:last_separator] or os.sep)


def frame_key(file_path: str, base_path: str) -> str:
    """Frame key for a file: its path relative to the base, with forward slashes."""
    try:
        relative = os.path.relpath(os.path.abspath(file_path), os.path.abspath(base_path))
    except ValueError:
        # Different drive on Windows
        relative = os.path.basename(file_path)

    if relative.startswith('..'):
        relative = os.path.basename(file_path)
    return relative.replace('\\', '/')


class AtlasGenerator:
    """Loads sprites, packs them and writes the atlas image, metadata and manifest."""

    def __init__(self, options: AtlasOptions):
        options.validate()
        self.options = options

    def generate(self) -> AtlasResult:
        """Generate the sprite atlas."""
        options = self.options

        sprites = self.load_sprites()
        if not sprites:
            raise NoInputFoundError(options.input)

        print(f"Packing {len(sprites)} sprites")

        manifest = None
        manifest_file = manifest_path(options.output)
        if options.uses_manifest:
            manifest = load_manifest(manifest_file)
            sprites = reorder_from_manifest(sprites, manifest)
            self._report_changes(sprites, manifest)

        packer = AtlasPacker(
            options.effective_padding,
            options.max_size,
            options.grid_size,
            stable_order=options.stable_order,
            presorted=options.uses_manifest,
        )

        if not packer.can_fit(sprites):
            raise CapacityExceededError(
                f"Sprites cannot fit in {options.max_size}x{options.max_size} atlas. "
                f"Try increasing max size or reducing sprite count.",
                options.max_size,
                options.grid_size,
            )

        placements, width, height = packer.pack(sprites)
        print(f"Atlas dimensions: {width}×{height}")

        image_path = f"{options.output}.png"
        sheet_img = compose_atlas(placements, width, height)
        sheet_img.save(image_path)

        json_path = atlas_json_path(options.output, options.format)
        write_atlas_json(self.build_metadata(placements, width, height, os.path.basename(image_path)), json_path)

        if options.uses_manifest:
            save_manifest(manifest_file, placements, manifest)

        return AtlasResult(image_path, json_path, len(placements), width, height)

    def load_sprites(self) -> List[Sprite]:
        """Load all sprite images matching the input, skipping unreadable ones."""
        options = self.options
        files = find_sprite_files(options.input)
        base_path = get_base_path(options.input)

        sprites = []
        for path in files:
            try:
                sprite = load_sprite(path, frame_key(path, base_path))
            except UnreadableImageError as e:
                print(f"Skipping {e.path}: {e.reason}")
                continue

            # Resize before trimming so trim offsets refer to the resized image
            if options.resize_to:
                sprite = resize_sprite(sprite, options.resize_to, options.resize_mode, options.resize_filter)
            if options.trim:
                sprite = trim_sprite(sprite)
            sprites.append(sprite)

        return sprites

    def build_metadata(self, placements: Sequence[Placement], width: int, height: int, image_name: str):
        options = self.options
        if options.format == AtlasFormat.PHASER3_ARRAY:
            return build_phaser_array(placements, width, height, image_name, options.scale, options.grid_metadata)
        if options.format == AtlasFormat.TILED:
            return build_tiled(placements, width, height, image_name, options.grid_size,
                               options.effective_padding)
        return build_phaser_hash(placements, width, height, image_name, options.scale, options.grid_metadata)

    def _report_changes(self, ordered: Sequence[Sprite], manifest):
        added, removed = manifest_changes(ordered, manifest)
        if added:
            print(f"Added {len(added)} new sprite(s) to end of atlas:")
            positions = {s.key: i for i, s in enumerate(ordered)}
            for key in added:
                print(f"   [{positions[key]}] {key}")
        if removed:
            print(f"Removed {len(removed)} sprite(s) from atlas")


def generate_atlas(options: Optional[AtlasOptions] = None, **kwargs) -> AtlasResult:
    """Generate a sprite atlas, from an AtlasOptions or the same fields as keywords."""
    if options is None:
        options = AtlasOptions(**kwargs)
    return AtlasGenerator(options).generate()
