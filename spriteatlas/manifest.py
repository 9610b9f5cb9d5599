"""Persisted sprite ordering that keeps tile IDs stable between builds.

The manifest lists sprite keys in the order they were placed last time.
Known keys keep their relative order, removed keys simply disappear, and new
keys are appended after everything already known.
"""
import json
import os
import tempfile
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple

from .sprite import Sprite

MANIFEST_VERSION = "1.0"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _default_file_mode() -> int:
    """Mode a plain open() would create a file with under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


class Manifest:
    """Sprite key order from a previous build."""
    def __init__(self, sprite_order: List[str], version: str = MANIFEST_VERSION,
                 created: Optional[str] = None, modified: Optional[str] = None):
        self.sprite_order = sprite_order
        self.version = version
        self.created = created
        self.modified = modified

    def __repr__(self):
        return f"Manifest(v{self.version}, {len(self.sprite_order)} sprites)"

    def to_dict(self) -> Dict:
        return {
            "version": self.version,
            "spriteOrder": list(self.sprite_order),
            "metadata": {
                "created": self.created,
                "modified": self.modified,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Manifest':
        order = data.get("spriteOrder")
        if not isinstance(order, list) or not all(isinstance(k, str) for k in order):
            raise ValueError("spriteOrder must be a list of strings")
        metadata = data.get("metadata") or {}
        return cls(
            order,
            version=str(data.get("version", MANIFEST_VERSION)),
            created=metadata.get("created"),
            modified=metadata.get("modified"),
        )


def manifest_path(output: str) -> str:
    """Return the manifest location for an atlas output path (without extension)."""
    return f"{output}.manifest.json"


def load_manifest(path: str) -> Optional[Manifest]:
    """Read a manifest, or None when there is no usable one."""
    if not os.path.exists(path):
        return None

    try:
        with open(path, 'r', encoding='utf-8') as f:
            return Manifest.from_dict(json.load(f))
    except (OSError, ValueError, AttributeError) as e:
        print(f"Warning: ignoring invalid manifest {path}: {e}")
        return None


def save_manifest(path: str, sprites: Sequence[Sprite], previous: Optional[Manifest] = None) -> Manifest:
    """Write the final sprite order, keeping the creation time of the previous manifest."""
    now = _now()
    manifest = Manifest(
        [s.key for s in sprites],
        created=previous.created if previous and previous.created else now,
        modified=now,
    )

    # Write next to the target and swap it in so readers never see a partial file
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(prefix=".manifest-", suffix=".json", dir=directory)
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            json.dump(manifest.to_dict(), f, indent=2)
        # mkstemp creates the file owner-only; match the atlas .png and .json
        os.chmod(tmp_path, _default_file_mode())
        os.replace(tmp_path, path)
    except BaseException:
        os.unlink(tmp_path)
        raise

    return manifest


def reorder_from_manifest(sprites: Sequence[Sprite], manifest: Optional[Manifest]) -> List[Sprite]:
    """Order sprites so that keys already in the manifest keep their positions."""
    if manifest is None or not manifest.sprite_order:
        return sorted(sprites, key=lambda s: s.key)

    by_key = {s.key: s for s in sprites}
    ordered = []
    for key in manifest.sprite_order:
        # pop() so a key listed twice is only placed once
        sprite = by_key.pop(key, None)
        if sprite is not None:
            ordered.append(sprite)

    known = set(manifest.sprite_order)
    new_sprites = sorted((s for s in sprites if s.key not in known), key=lambda s: s.key)

    return ordered + new_sprites


def manifest_changes(sprites: Sequence[Sprite], manifest: Optional[Manifest]) -> Tuple[List[str], List[str]]:
    """Return (added keys, removed keys) relative to the manifest."""
    if manifest is None:
        return [], []

    current = {s.key for s in sprites}
    known = set(manifest.sprite_order)
    added = sorted(current - known)
    removed = [key for key in manifest.sprite_order if key not in current]
    return added, removed
