"""
On-disk storage for sealed boxes and their keys.

Manages persistent storage for:
    - Sealed boxes (ciphertext plus k/n header)
    - Keys split from each box's encryption key
"""

import logging
from pathlib import Path
from typing import Optional

from ..crypto.shamir import Key, get_x
from ..crypto.vault import SealedBox


_logger = logging.getLogger(__name__)


class KeyStore:
    """
    Persistent storage for sealed boxes and keys.

    Directory Structure:
        store_dir/
            boxes/           # <name>.box, one per sealed box
            keys/<name>/     # <x>.key, one per key of that box
    """

    BOXES_DIR = "boxes"
    KEYS_DIR = "keys"
    BOX_SUFFIX = ".box"
    KEY_SUFFIX = ".key"

    def __init__(self, store_dir: str | Path):
        """Initialize keystore at specified directory."""
        self.store_dir = Path(store_dir)
        self._ensure_directories()

    def _ensure_directories(self) -> None:
        """Create directory structure."""
        self.store_dir.mkdir(parents=True, exist_ok=True)
        (self.store_dir / self.BOXES_DIR).mkdir(exist_ok=True)
        (self.store_dir / self.KEYS_DIR).mkdir(exist_ok=True)

    @staticmethod
    def _check_name(name: str) -> None:
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            raise ValueError(f"Invalid box name: {name!r}")

    def _box_path(self, name: str) -> Path:
        self._check_name(name)
        return self.store_dir / self.BOXES_DIR / f"{name}{self.BOX_SUFFIX}"

    def _keys_dir(self, name: str) -> Path:
        self._check_name(name)
        return self.store_dir / self.KEYS_DIR / name

    # --- Sealed Boxes ---

    def save_box(self, name: str, box: SealedBox) -> None:
        """Save a sealed box."""
        path = self._box_path(name)
        with open(path, "wb") as f:
            f.write(box.to_bytes())
        _logger.debug("Saved box %s to %s", name, path)

    def load_box(self, name: str) -> Optional[SealedBox]:
        """Load a sealed box."""
        path = self._box_path(name)
        if not path.exists():
            return None

        with open(path, "rb") as f:
            return SealedBox.from_bytes(f.read())

    def list_boxes(self) -> list[str]:
        """Names of all stored boxes, sorted."""
        boxes_dir = self.store_dir / self.BOXES_DIR
        return sorted(p.stem for p in boxes_dir.glob(f"*{self.BOX_SUFFIX}"))

    # --- Keys ---

    def save_keys(self, name: str, keys: list[Key]) -> list[Path]:
        """Save a box's keys, one file per x-coordinate."""
        keys_dir = self._keys_dir(name)
        keys_dir.mkdir(exist_ok=True)

        paths = []
        for key in keys:
            path = keys_dir / f"{get_x(key)}{self.KEY_SUFFIX}"
            with open(path, "wb") as f:
                f.write(key)
            paths.append(path)

        _logger.debug("Saved %d keys for box %s", len(paths), name)
        return paths

    def load_keys(self, name: str) -> list[Key]:
        """Load a box's keys, ordered by x-coordinate."""
        keys_dir = self._keys_dir(name)
        if not keys_dir.exists():
            return []

        keys = [self.import_key(p) for p in keys_dir.glob(f"*{self.KEY_SUFFIX}")]
        return sorted(keys, key=get_x)

    def export_key(self, name: str, x: int, export_path: str | Path) -> None:
        """Export one key to an external file."""
        path = self._keys_dir(name) / f"{x}{self.KEY_SUFFIX}"
        if not path.exists():
            raise ValueError(f"No key {x} found for box {name}")

        with open(export_path, "wb") as f:
            f.write(self.import_key(path))

    @staticmethod
    def import_key(import_path: str | Path) -> Key:
        """Import a key from an external file."""
        with open(import_path, "rb") as f:
            return f.read()
