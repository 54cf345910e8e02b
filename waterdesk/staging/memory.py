import logging

from waterdesk.staging.base import StagingArea

logger = logging.getLogger(__name__)

# One slot table per process, shared by every MemoryStagingArea.
_PROCESS_SLOTS: dict[str, str] = {}


class MemoryStagingArea(StagingArea):
    def __init__(self, slots: dict[str, str] | None = None) -> None:
        self.slots = _PROCESS_SLOTS if slots is None else slots

    def put(self, key: str, value: str) -> None:
        self.slots[key] = value
        logger.debug("Staged %s (%d chars)", key, len(value))

    def get(self, key: str) -> str | None:
        return self.slots.get(key)

    def delete(self, key: str) -> None:
        self.slots.pop(key, None)
