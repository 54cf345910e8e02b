import logging
from pathlib import Path

from waterdesk.staging.base import StagingArea

logger = logging.getLogger(__name__)


class LocalStagingArea(StagingArea):
    def __init__(self, base_dir: str) -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.base_dir / f"{key}.txt"

    def put(self, key: str, value: str) -> None:
        path = self._path(key)
        path.write_text(value, encoding="utf-8")
        logger.debug("Staged %s (%d chars) at %s", key, len(value), path.resolve())

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
