import asyncio

import structlog
from fastapi import APIRouter, Depends, status

from api.schemas import ScrapeRequest, ScrapeResponse
from core.config import Settings
from core.exceptions import UpstreamError, WistException
from dependencies import get_app_settings, get_firecrawl_client
from services.firecrawl import FirecrawlClient
from utils.urls import validate_product_url

router = APIRouter(tags=["scrape"])
log = structlog.get_logger()


@router.post("", response_model=ScrapeResponse)
async def scrape_product(
    payload: ScrapeRequest,
    settings: Settings = Depends(get_app_settings),
    firecrawl: FirecrawlClient = Depends(get_firecrawl_client)
):
    """Preview what would be saved for a URL. Nothing is persisted."""
    url = validate_product_url(payload.url)
    try:
        async with asyncio.timeout(settings.REQUEST_TIMEOUT_SECONDS):
            product = await firecrawl.scrape_product(url)
        return ScrapeResponse(success=True, data=product)
    except asyncio.TimeoutError:
        log.warning("scrape preview timed out", url=url)
        raise WistException("Request timed out", status_code=status.HTTP_504_GATEWAY_TIMEOUT)
    except UpstreamError as e:
        return ScrapeResponse(success=False, error=e.message)
