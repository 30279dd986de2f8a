import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence, Tuple

from lxml import etree

from mobilede_feed.core.exceptions import SelectorError

from .document import FeedDocument, node_text

logger = logging.getLogger(__name__)

BOOLEAN_TRUE = "true"


class EquipmentPolicy(str, Enum):
    EXPAND = "expand"
    COLLAPSE = "collapse"


@dataclass(frozen=True)
class Equipment:
    code: str
    value: str
    external_id: str

    def to_element(self) -> etree._Element:
        element = etree.Element("equipment")
        etree.SubElement(element, "code").text = self.code
        etree.SubElement(element, "value").text = self.value
        etree.SubElement(element, "external_id").text = self.external_id
        return element


def build_external_id(code: str, value: str) -> str:
    return code if value == BOOLEAN_TRUE else f"{code}.{value}"


def make_equipment(code: str, value: str) -> Equipment:
    return Equipment(code=code, value=value, external_id=build_external_id(code, value))


def parse_field_selectors(fields: str) -> List[str]:
    """Split the comma-separated ``equipment-fields`` parameter."""
    return [field.strip() for field in fields.split(",") if field.strip()]


def extract_values(node: etree._Element) -> List[str]:
    value_nodes = node.findall("value")
    if value_nodes:
        return [node_text(value_node) for value_node in value_nodes]
    return [node_text(node)]


class EquipmentTransformer:
    """Turns the nodes matched by field selectors into equipment entries.

    Each selector is an XPath expression evaluated relative to an ad. Matched
    nodes are removed from the ad and replaced by an ``equipments`` list and,
    with the expanding policy, an ``equipmentCollection`` summary holding the
    comma-joined external ids.
    """

    def __init__(self, selectors: Sequence[str], policy: EquipmentPolicy = EquipmentPolicy.EXPAND) -> None:
        self.policy = EquipmentPolicy(policy)
        self.selectors: List[Tuple[str, etree.XPath]] = [
            (selector, self._compile(selector)) for selector in selectors
        ]

    @staticmethod
    def _compile(selector: str) -> etree.XPath:
        try:
            return etree.XPath(selector)
        except etree.XPathSyntaxError as exc:
            raise SelectorError(selector, str(exc)) from exc

    def _match(self, selector: str, xpath: etree.XPath, ad: etree._Element) -> List[etree._Element]:
        try:
            result = xpath(ad)
        except etree.XPathError as exc:
            raise SelectorError(selector, str(exc)) from exc
        if not isinstance(result, list) or not all(isinstance(node, etree._Element) for node in result):
            raise SelectorError(selector, "expression must select elements")
        # Absolute paths such as //color would otherwise reach into other ads.
        return [node for node in result if node is ad or any(parent is ad for parent in node.iterancestors())]

    def extract(self, ad: etree._Element) -> List[Equipment]:
        """Collect the equipment of one ad and detach the matched nodes from it."""
        equipments: List[Equipment] = []
        for selector, xpath in self.selectors:
            for node in self._match(selector, xpath, ad):
                values = extract_values(node)
                if self.policy is EquipmentPolicy.COLLAPSE:
                    equipments.append(make_equipment(selector, ",".join(values)))
                else:
                    equipments.extend(make_equipment(selector, value) for value in values)

                parent = node.getparent()
                if parent is not None:
                    parent.remove(node)
        return equipments

    def transform(self, document: FeedDocument) -> FeedDocument:
        transformed = document.copy()
        count = 0
        for ad in transformed.ads:
            equipments = self.extract(ad)
            count += len(equipments)

            container = etree.SubElement(ad, "equipments")
            for equipment in equipments:
                container.append(equipment.to_element())
            if self.policy is EquipmentPolicy.EXPAND:
                collection = etree.SubElement(ad, "equipmentCollection")
                collection.text = ",".join(equipment.external_id for equipment in equipments)

        logger.info("Extracted %s equipment entries from %s ads", count, len(transformed.ads))
        return transformed
