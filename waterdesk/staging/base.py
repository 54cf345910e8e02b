from abc import ABC, abstractmethod


class StagingArea(ABC):
    """Named string slots shared between workflows. Last write wins."""

    @abstractmethod
    def put(self, key: str, value: str) -> None: ...

    @abstractmethod
    def get(self, key: str) -> str | None: ...

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the entry; a missing key is not an error."""
        ...
