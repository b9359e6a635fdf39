"""``.env`` file reader."""

from __future__ import annotations

from pathlib import Path


class EnvFile:
    """Reads ``KEY=VALUE`` lines; ``export`` prefixes are tolerated."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def read(self, key: str) -> str:
        """Return the value for *key*, or ``""`` if absent."""
        return self.read_all().get(key, "")

    def read_all(self) -> dict[str, str]:
        if not self.path.is_file():
            return {}
        values: dict[str, str] = {}
        for raw in self.path.read_text(encoding="utf-8").splitlines():
            line = raw.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            if line.startswith("export "):
                line = line[len("export "):]
            key, _, value = line.partition("=")
            values[key.strip()] = value.strip().strip('"').strip("'")
        return values
