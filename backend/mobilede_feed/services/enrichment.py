import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Mapping, Optional

from lxml import etree

from mobilede_feed.connectors.http import Fetcher
from mobilede_feed.core.config import get_settings
from mobilede_feed.core.exceptions import ParseError

from .document import FeedDocument, node_text, parse_xml

logger = logging.getLogger(__name__)

AD_ID_TAG = "mobileAdId"


def read_ad_id(ad: etree._Element) -> str:
    node = next(ad.iter(AD_ID_TAG), None)
    ad_id = node_text(node).strip()
    if not ad_id:
        raise ParseError(f"ad without {AD_ID_TAG}")
    return ad_id


class DetailEnricher:
    """Replaces every ad of a document with its detail document."""

    def __init__(
        self,
        fetcher: Fetcher,
        url_template: Optional[str] = None,
        max_workers: Optional[int] = None,
        encoding: Optional[str] = None,
    ) -> None:
        settings = get_settings()
        self.fetcher = fetcher
        self.url_template = url_template or settings.detail_url_template
        self.max_workers = max(max_workers if max_workers is not None else settings.detail_max_workers, 1)
        self.encoding = encoding

    def detail_url(self, mobile_ad_id: str) -> str:
        return self.url_template.format(mobile_ad_id=mobile_ad_id)

    def _fetch_detail(self, mobile_ad_id: str, headers: Mapping[str, str]) -> etree._Element:
        url = self.detail_url(mobile_ad_id)
        return parse_xml(self.fetcher.fetch(url, headers), url=url, encoding=self.encoding)

    def enrich(self, document: FeedDocument, headers: Optional[Mapping[str, str]] = None) -> FeedDocument:
        headers = headers or {}
        enriched = document.copy()
        ads = enriched.ads
        ad_ids = [read_ad_id(ad) for ad in ads]

        if self.max_workers == 1 or len(ad_ids) < 2:
            details: List[etree._Element] = [self._fetch_detail(ad_id, headers) for ad_id in ad_ids]
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                details = list(executor.map(lambda ad_id: self._fetch_detail(ad_id, headers), ad_ids))

        # Replacement only starts once every detail is in hand.
        for ad, detail in zip(ads, details):
            ad.getparent().replace(ad, detail)

        logger.info("Fetched details for %s ads", len(details))
        return enriched
