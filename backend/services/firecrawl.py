from typing import Any, Dict, Optional

import httpx
import structlog

from core.exceptions import UpstreamError
from models.product import ScrapedProduct
from services.normalizer import normalize_product

log = structlog.get_logger()

# JSON schema handed to Firecrawl's LLM extraction
PRODUCT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {"type": "string", "description": "Product title or name"},
        "description": {"type": "string", "description": "Product description"},
        "price": {"type": "number", "description": "Current price as a number"},
        "currency": {"type": "string", "description": "Currency code like INR, USD"},
        "originalPrice": {"type": "number", "description": "Original price before discount"},
        "brand": {"type": "string", "description": "Brand name"},
        "category": {"type": "string", "description": "Product category"},
        "imageUrl": {"type": "string", "description": "Main product image URL"},
        "highlights": {
            "type": "array",
            "description": "Product features or highlights",
            "items": {"type": "string"},
        },
        "rating": {"type": "number", "description": "Product rating 0-5"},
        "reviewCount": {"type": "integer", "description": "Number of reviews"},
        "availability": {
            "type": "string",
            "description": "Availability status like In Stock, Out of Stock",
        },
    },
    "required": ["title"],
}

METADATA_FIELDS = ("title", "description", "ogImage", "sourceURL")


def build_scrape_request(url: str) -> Dict[str, Any]:
    return {
        "url": url,
        "formats": [{"type": "json", "schema": PRODUCT_SCHEMA}],
    }


class FirecrawlClient:
    """Adapter for Firecrawl's /v2/scrape JSON extraction.

    The HTTP client is normally the application-wide one created at start-up
    and is left open by close(); a client is only created (and owned) here
    when none is passed in.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.firecrawl.dev",
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0
    ):
        if not api_key:
            raise ValueError("Firecrawl API key is required")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        self.client = http_client
        self._owns_client = http_client is None

    @property
    def scrape_endpoint(self) -> str:
        return f"{self.base_url}/v2/scrape"

    def _ensure_client(self) -> httpx.AsyncClient:
        if self.client is None or self.client.is_closed:
            self.client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self.client

    async def close(self):
        if self._owns_client and self.client is not None and not self.client.is_closed:
            await self.client.aclose()

    async def __aenter__(self):
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # making request
    async def _post_scrape(self, url: str) -> httpx.Response:
        client = self._ensure_client()
        try:
            return await client.post(
                self.scrape_endpoint,
                headers={
                    'Authorization': f'Bearer {self.api_key}',
                    'Content-Type': 'application/json'
                },
                json=build_scrape_request(url)
            )
        except httpx.RequestError as e:
            log.warning("firecrawl transport failure", url=url, error=repr(e))
            raise UpstreamError("transport failure", url=url) from e

    def _parse_envelope(self, response: httpx.Response, url: str) -> Dict[str, Any]:
        try:
            envelope = response.json()
        except ValueError as e:
            log.warning("firecrawl returned unparsable body", url=url, status=response.status_code)
            raise UpstreamError(
                "malformed upstream response", url=url, status=response.status_code
            ) from e

        if not isinstance(envelope, dict) or not isinstance(envelope.get("success"), bool):
            log.warning("firecrawl envelope has unexpected shape", url=url, status=response.status_code)
            raise UpstreamError("malformed upstream response", url=url, status=response.status_code)

        return envelope

    async def scrape_raw(self, url: str) -> Dict[str, Any]:
        """Return {"json": ..., "metadata": ...} for `url`, or raise UpstreamError."""
        log.info("firecrawl scrape started", url=url)
        response = await self._post_scrape(url)
        envelope = self._parse_envelope(response, url)

        if not envelope["success"]:
            error = envelope.get("error")
            reason = error if isinstance(error, str) and error.strip() else "upstream reported failure"
            log.warning(
                "firecrawl scrape failed", url=url, status=response.status_code, reason=reason
            )
            raise UpstreamError(reason, url=url, status=response.status_code)

        data = envelope.get("data")
        extracted = data.get("json") if isinstance(data, dict) else None
        if not isinstance(extracted, dict):
            log.warning("firecrawl response has no extraction payload", url=url)
            raise UpstreamError("missing extraction payload", url=url, status=response.status_code)

        raw_metadata = data.get("metadata")
        metadata = None
        if isinstance(raw_metadata, dict):
            metadata = {key: raw_metadata.get(key) for key in METADATA_FIELDS}

        log.info("firecrawl scrape finished", url=url, status=response.status_code)
        return {"json": extracted, "metadata": metadata}

    async def scrape_product(self, url: str) -> ScrapedProduct:
        payload = await self.scrape_raw(url)
        return normalize_product(payload["json"], payload["metadata"], url)
