import copy
import re
from typing import Any, Dict, Iterable, List, Optional

from lxml import etree

from mobilede_feed.core.exceptions import ParseError

ROOT_TAG = "searchResult"
LEADING_INT_PATTERN = re.compile(r"\s*([+-]?\d+)")


def _safe_int(text: Optional[str]) -> int:
    if not text:
        return 0
    match = LEADING_INT_PATTERN.match(text)
    return int(match.group(1)) if match else 0


def node_text(node: Optional[etree._Element]) -> str:
    if node is None:
        return ""
    return "".join(node.itertext())


def child_int(node: etree._Element, tag: str) -> int:
    """Integer value of the first ``tag`` child, 0 when missing or not numeric."""
    return _safe_int(node_text(node.find(tag)))


def parse_xml(data: bytes, url: Optional[str] = None, encoding: Optional[str] = None) -> etree._Element:
    parser = etree.XMLParser(encoding=encoding, resolve_entities=False, no_network=True, huge_tree=True)
    try:
        root = etree.fromstring(data, parser=parser)
    except (etree.XMLSyntaxError, ValueError, LookupError) as exc:
        raise ParseError(str(exc), url=url) from exc
    if root is None:
        raise ParseError("empty document", url=url)
    return root


class FeedDocument:
    """The merged search result every pipeline stage consumes and produces.

    Wraps an lxml tree shaped as ``<searchResult><total/><ads><ad/>...</ads></searchResult>``.
    """

    def __init__(self, root: etree._Element) -> None:
        self.root = root

    @classmethod
    def build(cls, total: int, ads: Iterable[etree._Element]) -> "FeedDocument":
        root = etree.Element(ROOT_TAG)
        etree.SubElement(root, "total").text = str(total)
        container = etree.SubElement(root, "ads")
        for ad in ads:
            container.append(ad)
        return cls(root)

    @classmethod
    def from_bytes(cls, data: bytes, url: Optional[str] = None, encoding: Optional[str] = None) -> "FeedDocument":
        return cls(parse_xml(data, url=url, encoding=encoding))

    @property
    def total(self) -> int:
        return child_int(self.root, "total")

    @property
    def ads_container(self) -> etree._Element:
        container = self.root.find("ads")
        if container is None:
            container = etree.SubElement(self.root, "ads")
        return container

    @property
    def ads(self) -> List[etree._Element]:
        return self.ads_container.findall("ad")

    def copy(self) -> "FeedDocument":
        return FeedDocument(copy.deepcopy(self.root))

    def to_xml(self, encoding: str = "utf-8") -> str:
        return etree.tostring(self.root, encoding=encoding, xml_declaration=True).decode(encoding)

    def to_dict(self) -> Dict[str, Any]:
        return {self.root.tag: element_to_dict(self.root)}

    def __len__(self) -> int:
        return len(self.ads)


def element_to_dict(element: etree._Element) -> Any:
    """Convert an element to plain Python data.

    Text-only elements become strings, repeated child tags become lists and
    attributes are kept under ``"@attributes"``.
    """
    children = [child for child in element if isinstance(child.tag, str)]
    if not children and not element.attrib:
        return (element.text or "").strip()

    data: Dict[str, Any] = {}
    if element.attrib:
        data["@attributes"] = dict(element.attrib)
    for child in children:
        value = element_to_dict(child)
        key = etree.QName(child).localname
        if key in data:
            if not isinstance(data[key], list):
                data[key] = [data[key]]
            data[key].append(value)
        else:
            data[key] = value
    if not children:
        text = (element.text or "").strip()
        if text:
            data["#text"] = text
    return data
