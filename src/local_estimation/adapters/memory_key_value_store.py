"""Process-local key-value slots."""

from dataclasses import dataclass, field

from local_estimation.services.calibration import KeyValueStore


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """Keeps values in a dict for the lifetime of the process."""

    values: dict[str, str] = field(default_factory=dict)
    writes: int = 0

    async def read(self, key: str) -> str | None:
        return self.values.get(key)

    async def write(self, key: str, value: str) -> None:
        self.values[key] = value
        self.writes += 1

    async def delete(self, key: str) -> None:
        self.values.pop(key, None)
