from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

import pytest

from mobilede_feed.core.exceptions import FetchError

FIXTURES = Path(__file__).parent / "fixtures"


def read_fixture(name: str) -> bytes:
    return (FIXTURES / name).read_bytes()


class FakeFetcher:
    """In-memory fetcher answering from a url -> body map and recording every call."""

    def __init__(self, responses: Optional[Dict[str, bytes]] = None) -> None:
        self.responses = dict(responses or {})
        self.calls: List[Tuple[str, Dict[str, str]]] = []

    def fetch(self, url: str, headers: Optional[Mapping[str, str]] = None) -> bytes:
        self.calls.append((url, dict(headers or {})))
        if url not in self.responses:
            raise FetchError(url, "HTTP 404")
        return self.responses[url]

    @property
    def urls(self) -> List[str]:
        return [url for url, _headers in self.calls]


@pytest.fixture
def search_pages() -> Dict[str, bytes]:
    return {
        "https://example.test/search?classification=Car&page.number=1": read_fixture("search_page1.xml"),
        "https://example.test/search?classification=Car&page.number=2": read_fixture("search_page2.xml"),
    }


@pytest.fixture
def detail_pages() -> Dict[str, bytes]:
    return {
        f"https://services.mobile.de/search-api/ad/{ad_id}": read_fixture(f"ad_{ad_id}.xml")
        for ad_id in ("100", "101", "102")
    }
