"""Device-local file storage for key-value slots."""

import asyncio
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from local_estimation.services.calibration import KeyValueStore


@dataclass
class FileKeyValueStore(KeyValueStore):
    """Stores each key as a JSON file inside a directory."""

    directory: Path

    def __post_init__(self) -> None:
        self.directory = Path(self.directory)

    async def read(self, key: str) -> str | None:
        """Return the file contents for a key, if the file exists."""
        return await asyncio.to_thread(self._read, key)

    async def write(self, key: str, value: str) -> None:
        """Replace the file for a key atomically."""
        await asyncio.to_thread(self._write, key, value)

    async def delete(self, key: str) -> None:
        """Remove the file for a key."""
        await asyncio.to_thread(self._path(key).unlink, missing_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def _read(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def _write(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            Path(tmp_name).replace(self._path(key))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
