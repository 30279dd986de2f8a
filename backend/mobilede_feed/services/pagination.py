import logging
from typing import List, Mapping, Optional

from lxml import etree

from mobilede_feed.connectors.http import Fetcher
from mobilede_feed.core.config import get_settings

from .document import FeedDocument, child_int, parse_xml

logger = logging.getLogger(__name__)

PAGE_PARAMETER = "page.number"


def build_page_uri(uri: str, page: int) -> str:
    separator = "&" if "?" in uri else "?"
    return f"{uri}{separator}{PAGE_PARAMETER}={page}"


class PageAggregator:
    """Reads every page of a search query and merges the ads into one document."""

    def __init__(self, fetcher: Fetcher, encoding: Optional[str] = None, page_limit: Optional[int] = None) -> None:
        self.fetcher = fetcher
        self.encoding = encoding
        self.page_limit = page_limit if page_limit is not None else get_settings().page_limit

    def aggregate(self, uri: str, headers: Optional[Mapping[str, str]] = None) -> FeedDocument:
        ads: List[etree._Element] = []
        total = 0
        current_page = 1
        fetched = 0

        while True:
            page_uri = build_page_uri(uri, current_page)
            page = parse_xml(self.fetcher.fetch(page_uri, headers or {}), url=page_uri, encoding=self.encoding)
            fetched += 1

            if fetched == 1:
                total = child_int(page, "total")

            container = page.find("ads")
            page_ads = container.findall("ad") if container is not None else []
            ads.extend(page_ads)

            reported_page = child_int(page, "currentPage")
            max_pages = child_int(page, "maxPages")
            logger.debug(
                "Page %s of %s read from %s (%s ads)", reported_page, max_pages, page_uri, len(page_ads)
            )

            # The API's own page counter drives the loop but never moves it backwards.
            current_page = max(reported_page, current_page) + 1
            if current_page > max_pages:
                break
            if fetched >= self.page_limit:
                logger.warning("Stopping after %s pages for %s, %s pages reported", fetched, uri, max_pages)
                break

        logger.info("Aggregated %s ads from %s page(s), declared total %s", len(ads), fetched, total)
        return FeedDocument.build(total, ads)
