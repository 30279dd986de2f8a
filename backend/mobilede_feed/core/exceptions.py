from typing import Iterable, Optional


class ConnectorError(Exception):
    """Base class for every failure raised while reading a feed."""


class ConfigurationError(ConnectorError):
    def __init__(self, problems: Iterable[str]) -> None:
        self.problems = list(problems)
        super().__init__("\n".join(self.problems) or "Invalid connector configuration")


class FetchError(ConnectorError):
    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Error fetching data from URI: {url} ({reason})")


class ParseError(ConnectorError):
    def __init__(self, reason: str, url: Optional[str] = None) -> None:
        self.url = url
        self.reason = reason
        message = f"Error parsing XML data from URI: {url} ({reason})" if url else f"Error parsing XML data ({reason})"
        super().__init__(message)


class SelectorError(ConnectorError):
    def __init__(self, selector: str, reason: str) -> None:
        self.selector = selector
        self.reason = reason
        super().__init__(f"Invalid field selector {selector!r}: {reason}")
