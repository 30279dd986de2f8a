import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Literal, Mapping, Optional, Sequence, Union

from mobilede_feed.connectors.base import FeedSource
from mobilede_feed.connectors.http import Fetcher
from mobilede_feed.connectors.mobilede import BASE_URL, MobileDeConnector, StageHook
from mobilede_feed.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectorConfig:
    factory: Callable[..., FeedSource]
    base_url: str


CONNECTORS: Dict[str, ConnectorConfig] = {
    MobileDeConnector.name: ConnectorConfig(factory=MobileDeConnector, base_url=BASE_URL),
}


def get_connector_config(connector_type: str) -> ConnectorConfig:
    try:
        return CONNECTORS[connector_type]
    except KeyError:
        raise ConfigurationError([f"Unknown connector type: {connector_type}"]) from None


def run_feed(
    connector_type: str,
    parameters: Mapping[str, Any],
    output: Literal["xml", "array"] = "xml",
    fetcher: Optional[Fetcher] = None,
    hooks: Sequence[StageHook] = (),
) -> Union[str, Dict[str, Any]]:
    config = get_connector_config(connector_type)
    connector = config.factory(parameters, fetcher=fetcher, hooks=hooks)
    try:
        if output == "array":
            result = connector.fetch_array()
        else:
            result = connector.fetch_raw()
    finally:
        connector.close()
    if isinstance(result, str):
        logger.info("[%s] feed read, output=%s size=%s", connector_type, output, len(result))
    else:
        logger.info("[%s] feed read, output=%s", connector_type, output)
    return result
