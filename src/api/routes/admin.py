"""Administrative endpoints for catalog maintenance."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from starlette.requests import Request
import structlog

from src.api.auth import verify_api_key
from src.api.dependencies import get_refresh_job
from src.api.models import RefreshResponse
from src.api.rate_limit import limiter
from src.config.settings import get_settings
from src.ingestion.refresh import CatalogRefreshJob

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/admin")


@router.post(
    "/fetch-stocks",
    response_model=RefreshResponse,
    responses={
        401: {"description": "Invalid API key"},
        500: {"model": RefreshResponse, "description": "Refresh failed"},
    },
    summary="Refresh the stock catalog from the market data provider",
    description="""
    Fetch every listed stock from TwelveData and replace the catalog
    contents with it. Entries without a symbol or name are dropped.
    The replacement is atomic: searches see either the old or the new
    catalog, never a mix.
    """,
)
@limiter.limit(lambda: get_settings().rate_limit_default)
async def fetch_stocks(
    request: Request,
    api_key: str = Depends(verify_api_key),
    job: CatalogRefreshJob = Depends(get_refresh_job),
):
    result = await job.run()
    body = RefreshResponse(
        success=result.success,
        message=result.message,
        records_processed=result.processed,
    )

    if result.failed:
        logger.error("Catalog refresh failed", error=result.error)
        return JSONResponse(status_code=500, content=body.model_dump(by_alias=True))

    logger.info("Catalog refresh finished", success=result.success, processed=result.processed)
    return JSONResponse(status_code=200, content=body.model_dump(by_alias=True))
