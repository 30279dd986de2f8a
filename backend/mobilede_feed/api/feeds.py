from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse, Response

from mobilede_feed.connectors.http import Fetcher
from mobilede_feed.core.config import get_settings
from mobilede_feed.core.exceptions import ConfigurationError, FetchError, ParseError, SelectorError
from mobilede_feed.schemas.feed import FeedRequest
from mobilede_feed.workers import jobs

router = APIRouter(prefix="/v1", tags=["feeds"])


def get_fetcher() -> Optional[Fetcher]:
    return None


@router.post("/feeds/{connector_type}")
def read_feed(
    connector_type: str,
    payload: FeedRequest,
    output: Literal["xml", "array"] = Query("xml"),
    fetcher: Optional[Fetcher] = Depends(get_fetcher),
) -> Response:
    parameters = payload.parameters.model_dump(by_alias=True, exclude_none=True)
    try:
        result = jobs.run_feed(connector_type, parameters, output=output, fetcher=fetcher)
    except (ConfigurationError, SelectorError) as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    except (FetchError, ParseError) as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

    if output == "array":
        return JSONResponse(result)
    charset = get_settings().output_charset
    return Response(content=result.encode(charset), media_type=f"application/xml; charset={charset}")
