"""Target database connection endpoints.

Endpoints:
    GET    /v1/config/connection   show the configured connection (password redacted)
    POST   /v1/config/connection   verify and store a new connection
"""

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from dbcreds.config import settings
from dbcreds.db.connection import (
    ConnectionConfig,
    read_connection_config,
    redact_url,
    write_connection_config,
)
from dbcreds.logging_config import get_logger
from dbcreds.storage import get_storage
from dbcreds.storage.protocol import KeyValueStore

router = APIRouter(tags=["config"])
logger = get_logger(__name__)


@router.get("/config/connection", summary="Show the target database connection")
async def read_connection(storage: KeyValueStore = Depends(get_storage)) -> JSONResponse:
    config = await read_connection_config(storage)
    if config is None:
        url, source = str(settings.database.url), "settings"
    else:
        url, source = config.driver_url(), "storage"
    return JSONResponse(content={"data": {"connection_url": redact_url(url), "source": source}})


@router.post(
    "/config/connection",
    summary="Configure the target database connection",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def write_connection(
    connection_url: str = Body(..., embed=True),
    storage: KeyValueStore = Depends(get_storage),
) -> Response:
    """Verify the connection, then store it and switch to it."""
    try:
        config = ConnectionConfig(connection_url=connection_url)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.errors(include_url=False, include_context=False, include_input=False),
        ) from None

    await write_connection_config(storage, config)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
