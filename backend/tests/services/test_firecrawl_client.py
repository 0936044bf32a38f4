import httpx
import pytest

from core.exceptions import UpstreamError
from services.firecrawl import PRODUCT_SCHEMA, FirecrawlClient, build_scrape_request
from conftest import FIRECRAWL_BASE, firecrawl_success, json_responder, timeout_responder


@pytest.fixture
def client_for(make_transport, mock_http_client):
    def factory(responder):
        transport = make_transport(responder)
        client = FirecrawlClient(
            api_key="secret-key",
            base_url=FIRECRAWL_BASE + "/",
            http_client=mock_http_client(transport),
        )
        return client, transport
    return factory


def test_request_body_embeds_url_and_schema():
    body = build_scrape_request("https://www.flipkart.com/shoe")

    assert body["url"] == "https://www.flipkart.com/shoe"
    assert body["formats"] == [{"type": "json", "schema": PRODUCT_SCHEMA}]


def test_schema_requests_every_product_field():
    props = PRODUCT_SCHEMA["properties"]

    assert set(props) == {
        "title", "description", "price", "currency", "originalPrice", "brand",
        "category", "imageUrl", "highlights", "rating", "reviewCount", "availability",
    }
    assert PRODUCT_SCHEMA["required"] == ["title"]
    assert props["price"]["type"] == "number"
    assert props["reviewCount"]["type"] == "integer"
    assert props["highlights"]["items"] == {"type": "string"}
    assert all(p.get("description") for p in props.values())


def test_missing_api_key_is_rejected():
    with pytest.raises(ValueError):
        FirecrawlClient(api_key="")


@pytest.mark.asyncio
async def test_successful_scrape_posts_to_v2_endpoint(client_for):
    client, transport = client_for(json_responder(firecrawl_success(
        {"title": "Shoe", "price": 49.99, "currency": "USD"},
        {"ogImage": "https://img/og.png", "sourceURL": "https://www.flipkart.com/shoe"},
    )))

    product = await client.scrape_product("https://www.flipkart.com/shoe")

    request = transport.requests[0]
    assert request.method == "POST"
    assert str(request.url) == f"{FIRECRAWL_BASE}/v2/scrape"
    assert request.headers["Authorization"] == "Bearer secret-key"
    assert transport.last_body()["url"] == "https://www.flipkart.com/shoe"

    assert product.title == "Shoe"
    assert product.price == 49.99
    assert product.currency == "USD"
    assert product.image_url == "https://img/og.png"
    assert product.retailer.name == "Flipkart"


@pytest.mark.asyncio
async def test_unsuccessful_envelope_carries_upstream_error(client_for):
    client, _ = client_for(json_responder({"success": False, "error": "blocked"}, status_code=403))

    with pytest.raises(UpstreamError) as exc_info:
        await client.scrape_product("https://www.amazon.in/dp/1")

    assert "blocked" in str(exc_info.value)
    assert exc_info.value.status_code == 502
    assert exc_info.value.details["upstream_status"] == 403


@pytest.mark.asyncio
async def test_unsuccessful_envelope_without_message(client_for):
    client, _ = client_for(json_responder({"success": False}))

    with pytest.raises(UpstreamError, match="upstream reported failure"):
        await client.scrape_product("https://www.amazon.in/dp/1")


@pytest.mark.asyncio
@pytest.mark.parametrize("envelope", [
    {"success": True},
    {"success": True, "data": None},
    {"success": True, "data": {"metadata": {"title": "x"}}},
    {"success": True, "data": {"json": None}},
    {"success": True, "data": {"json": ["not", "an", "object"]}},
])
async def test_missing_extraction_payload(client_for, envelope):
    client, _ = client_for(json_responder(envelope))

    with pytest.raises(UpstreamError, match="missing extraction payload"):
        await client.scrape_product("https://shop.example.com/p")


@pytest.mark.asyncio
async def test_unparsable_body_is_malformed(client_for):
    client, _ = client_for(lambda request: httpx.Response(502, text="<html>Bad gateway</html>"))

    with pytest.raises(UpstreamError, match="malformed upstream response"):
        await client.scrape_product("https://shop.example.com/p")


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [[1, 2, 3], {"data": {}}, {"success": "yes"}])
async def test_unexpected_envelope_shape_is_malformed(client_for, body):
    client, _ = client_for(json_responder(body))

    with pytest.raises(UpstreamError, match="malformed upstream response"):
        await client.scrape_product("https://shop.example.com/p")


@pytest.mark.asyncio
async def test_timeout_is_a_transport_failure(client_for):
    client, transport = client_for(timeout_responder)

    with pytest.raises(UpstreamError, match="transport failure"):
        await client.scrape_product("https://shop.example.com/p")

    # no retry inside the client
    assert transport.calls == 1


@pytest.mark.asyncio
async def test_connection_error_is_a_transport_failure(client_for):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    client, _ = client_for(refuse)

    with pytest.raises(UpstreamError, match="transport failure"):
        await client.scrape_product("https://shop.example.com/p")


@pytest.mark.asyncio
async def test_close_leaves_injected_client_open(client_for):
    client, _ = client_for(json_responder(firecrawl_success({"title": "x"})))

    await client.close()

    assert client.client.is_closed is False


@pytest.mark.asyncio
async def test_owned_client_is_closed():
    async with FirecrawlClient(api_key="k") as client:
        owned = client.client
        assert owned is not None

    assert owned.is_closed
