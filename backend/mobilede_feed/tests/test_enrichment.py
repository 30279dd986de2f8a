import pytest
from lxml import etree

from conftest import FakeFetcher
from mobilede_feed.core.exceptions import FetchError, ParseError
from mobilede_feed.services.document import FeedDocument
from mobilede_feed.services.enrichment import DetailEnricher, read_ad_id


def _document(*ads: str) -> FeedDocument:
    return FeedDocument.build(len(ads), [etree.fromstring(ad) for ad in ads])


def test_enrichment_replaces_ad_wholesale():
    document = _document("<ad><mobileAdId>42</mobileAdId><localNote>keep?</localNote><price>1</price></ad>")
    detail = b"<ad><mobileAdId>42</mobileAdId><price>9000</price></ad>"
    fetcher = FakeFetcher({"https://services.mobile.de/search-api/ad/42": detail})

    enriched = DetailEnricher(fetcher).enrich(document, {"Accept": "application/xml"})

    assert fetcher.calls == [("https://services.mobile.de/search-api/ad/42", {"Accept": "application/xml"})]
    [ad] = enriched.ads
    assert etree.tostring(ad) == detail
    assert ad.find("localNote") is None


def test_enrichment_keeps_document_order_and_total(detail_pages):
    document = _document(
        "<ad><mobileAdId>102</mobileAdId></ad>",
        "<ad><mobileAdId>100</mobileAdId></ad>",
        "<ad><mobileAdId>101</mobileAdId></ad>",
    )

    enriched = DetailEnricher(FakeFetcher(detail_pages)).enrich(document)

    assert [ad.findtext("price") for ad in enriched.ads] == ["10200", "10000", "10100"]
    assert enriched.total == 3


def test_concurrent_enrichment_matches_sequential(detail_pages):
    document = _document(*[f"<ad><mobileAdId>{ad_id}</mobileAdId></ad>" for ad_id in ("101", "100", "102", "100")])

    sequential = DetailEnricher(FakeFetcher(detail_pages), max_workers=1).enrich(document)
    concurrent = DetailEnricher(FakeFetcher(detail_pages), max_workers=4).enrich(document)

    assert concurrent.to_xml() == sequential.to_xml()


def test_failure_leaves_input_untouched(detail_pages):
    document = _document(
        "<ad><mobileAdId>100</mobileAdId><local>x</local></ad>",
        "<ad><mobileAdId>404</mobileAdId></ad>",
    )
    before = document.to_xml()

    with pytest.raises(FetchError):
        DetailEnricher(FakeFetcher(detail_pages)).enrich(document)

    assert document.to_xml() == before


def test_malformed_detail_raises_parse_error():
    document = _document("<ad><mobileAdId>7</mobileAdId></ad>")
    fetcher = FakeFetcher({"https://services.mobile.de/search-api/ad/7": b"<ad><price>1</ad>"})

    with pytest.raises(ParseError) as excinfo:
        DetailEnricher(fetcher).enrich(document)

    assert excinfo.value.url == "https://services.mobile.de/search-api/ad/7"


def test_ad_without_identifier_is_rejected():
    with pytest.raises(ParseError):
        read_ad_id(etree.fromstring("<ad><price>1</price></ad>"))


def test_identifier_may_be_nested():
    assert read_ad_id(etree.fromstring("<ad><meta><mobileAdId> 55 </mobileAdId></meta></ad>")) == "55"


def test_custom_url_template():
    enricher = DetailEnricher(FakeFetcher(), url_template="https://mirror.test/ads/{mobile_ad_id}.xml")

    assert enricher.detail_url("9") == "https://mirror.test/ads/9.xml"
