# shared_lib/assets.py
from pathlib import Path
from typing import Optional, Union


# Background images shipped next to the bot package
BUNDLED_ASSETS_DIR = Path(__file__).resolve().parent.parent / "xibao" / "assets"


class AssetNotFoundError(Exception):
    """Raised when a requested asset file does not exist."""
    pass


class AssetStore:
    """Synchronous read access to a directory of bundled files."""

    def __init__(self, directory: Optional[Union[str, Path]] = None):
        self.directory = Path(directory) if directory else BUNDLED_ASSETS_DIR

    def resolve(self, name: str) -> Path:
        root = self.directory.resolve()
        path = (root / name).resolve()
        if root != path and root not in path.parents:
            raise AssetNotFoundError(f"Asset {name!r} is outside {root}")
        return path

    def read_file(self, name: str) -> bytes:
        """Read an asset, hitting the disk on every call."""
        path = self.resolve(name)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise AssetNotFoundError(f"Asset {name!r} not found in {self.directory}")

    def missing(self, *names: str) -> list:
        """Names among `names` that are not present on disk."""
        return [name for name in names if not self.resolve(name).is_file()]
