from abc import ABC, abstractmethod
from typing import Any, Dict

from mobilede_feed.services.document import FeedDocument


class FeedSource(ABC):
    name: str

    @abstractmethod
    def fetch_document(self) -> FeedDocument:  # pragma: no cover - interface
        """Run the full query and return the resulting document."""

    @abstractmethod
    def fetch_raw(self) -> str:  # pragma: no cover - interface
        """Return the response as is, serialized."""

    def fetch_xml(self) -> str:
        return self.fetch_raw()

    @abstractmethod
    def fetch_array(self) -> Dict[str, Any]:  # pragma: no cover - interface
        """Return the response as nested Python data."""
