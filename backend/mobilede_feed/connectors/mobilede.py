import base64
import logging
import warnings
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from mobilede_feed.core.config import get_settings
from mobilede_feed.core.exceptions import ConfigurationError, ConnectorError
from mobilede_feed.schemas.feed import FeedParameters
from mobilede_feed.services.document import FeedDocument
from mobilede_feed.services.enrichment import DetailEnricher
from mobilede_feed.services.equipment import EquipmentPolicy, EquipmentTransformer
from mobilede_feed.services.pagination import PageAggregator

from .base import FeedSource
from .http import Fetcher, HttpFetcher

logger = logging.getLogger(__name__)

BASE_URL = "https://services.mobile.de/search-api"

StageHook = Callable[[str, FeedDocument], FeedDocument]

ERROR = "error"
WARNING = "warning"
NOTICE = "notice"


def build_request_headers(parameters: FeedParameters) -> Dict[str, str]:
    headers = dict(parameters.headers)
    if parameters.username is not None and parameters.password is not None:
        token = base64.b64encode(f"{parameters.username}:{parameters.password}".encode("utf-8")).decode("ascii")
        headers["Authorization"] = f"Basic {token}"
    if parameters.accept is not None:
        headers["Accept"] = parameters.accept
    if parameters.useragent is not None:
        warnings.warn(
            '"useragent" property is deprecated. Use headers property instead.',
            DeprecationWarning,
            stacklevel=2,
        )
        headers["User-Agent"] = parameters.useragent
    return headers


class MobileDeConnector(FeedSource):
    name = "mobilede"

    def __init__(
        self,
        parameters: Union[FeedParameters, Mapping[str, Any]],
        fetcher: Optional[Fetcher] = None,
        hooks: Sequence[StageHook] = (),
    ) -> None:
        self.raw_parameters = parameters
        self._fetcher = fetcher
        self._owns_fetcher = fetcher is None
        self.hooks = list(hooks)
        self.settings = get_settings()

    def _fetcher_or_default(self) -> Fetcher:
        if self._fetcher is None:
            self._fetcher = HttpFetcher()
        return self._fetcher

    def close(self) -> None:
        if self._owns_fetcher and isinstance(self._fetcher, HttpFetcher):
            self._fetcher.close()

    def __enter__(self) -> "MobileDeConnector":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def check_configuration(self) -> Dict[str, List[str]]:
        problems: Dict[str, List[str]] = {ERROR: [], WARNING: [], NOTICE: []}
        if isinstance(self.raw_parameters, FeedParameters):
            parameters = self.raw_parameters
        else:
            try:
                parameters = FeedParameters.model_validate(dict(self.raw_parameters))
            except ValidationError as exc:
                for error in exc.errors():
                    location = ".".join(str(part) for part in error["loc"])
                    problems[ERROR].append(f"Invalid parameter {location}: {error['msg']}")
                return problems

        if not parameters.uri:
            problems[ERROR].append("No feed defined. Please set the uri parameter.")
        if (parameters.username is None) != (parameters.password is None):
            problems[WARNING].append("Both username and password are needed for authentication, ignoring them.")
        if parameters.useragent is not None:
            problems[NOTICE].append('"useragent" is deprecated, set a User-Agent in headers instead.')
        if parameters.equipment_fields is not None and not parameters.field_selectors:
            problems[WARNING].append("equipment-fields is set but contains no field selector.")
        return problems

    @property
    def parameters(self) -> FeedParameters:
        problems = self.check_configuration()
        for problem in problems[NOTICE]:
            logger.info("[%s] %s", NOTICE, problem)
        for problem in problems[WARNING]:
            logger.warning("[%s] %s", WARNING, problem)
        if problems[ERROR]:
            for problem in problems[ERROR]:
                logger.error("[%s] %s", ERROR, problem)
            raise ConfigurationError(problems[ERROR])
        if isinstance(self.raw_parameters, FeedParameters):
            return self.raw_parameters
        return FeedParameters.model_validate(dict(self.raw_parameters))

    def _run_hooks(self, stage: str, document: FeedDocument) -> FeedDocument:
        for hook in self.hooks:
            document = hook(stage, document)
        return document

    def query(self) -> FeedDocument:
        parameters = self.parameters
        logger.info("Call parameters %s", parameters.safe_dump())
        headers = build_request_headers(parameters)
        fetcher = self._fetcher_or_default()

        try:
            document = PageAggregator(fetcher, encoding=parameters.encoding).aggregate(parameters.uri, headers)
            document = self._run_hooks("pages", document)

            if parameters.get_detail:
                document = DetailEnricher(fetcher, encoding=parameters.encoding).enrich(document, headers)
                document = self._run_hooks("details", document)

            if parameters.equipment_fields is not None:
                policy = EquipmentPolicy(parameters.equipment_policy or self.settings.equipment_policy)
                document = EquipmentTransformer(parameters.field_selectors, policy=policy).transform(document)
                document = self._run_hooks("equipment", document)
        except ConnectorError:
            logger.exception("Feed %s could not be read", parameters.uri)
            raise

        return self._run_hooks("response", document)

    def fetch_document(self) -> FeedDocument:
        return self.query()

    def fetch_raw(self) -> str:
        return self.query().to_xml(self.settings.output_charset)

    def fetch_array(self) -> Dict[str, Any]:
        result = self.query().to_dict()
        logger.debug("Structured data %s", result)
        return result
