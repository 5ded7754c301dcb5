import httpx
import pytest
import respx

from quote_gateway.services.quote_provider import (
    QuoteProviderError,
    YahooFinanceClient,
    extract_price,
    format_price,
)

QUOTE_URL = "https://quotes.test/v8/finance/chart"
SEARCH_URL = "https://quotes.test/v1/finance/search"


def _chart(price):
    meta = {} if price is None else {"regularMarketPrice": price}
    return {"chart": {"result": [{"meta": meta}], "error": None}}


@pytest.fixture
def client():
    return YahooFinanceClient(user_agent="quote-gateway-test", quote_url=QUOTE_URL, search_url=SEARCH_URL)


@pytest.mark.asyncio
async def test_get_price_success(client):
    with respx.mock as rs:
        route = rs.get(host="quotes.test", path="/v8/finance/chart/AAPL").respond(200, json=_chart(150.25))

        price = await client.get_price("AAPL")

        assert price == 150.25
        request = route.calls.last.request
        assert request.headers["User-Agent"] == "quote-gateway-test"
        assert request.url.params["interval"] == "1d"


@pytest.mark.asyncio
async def test_get_price_not_found_is_none(client):
    with respx.mock as rs:
        rs.get(host="quotes.test", path="/v8/finance/chart/NOPE").respond(404, json={"chart": {"result": None}})

        assert await client.get_price("NOPE") is None


@pytest.mark.asyncio
async def test_get_price_without_price_field_is_none(client):
    with respx.mock as rs:
        rs.get(host="quotes.test", path="/v8/finance/chart/INVALID").respond(200, json=_chart(None))

        assert await client.get_price("INVALID") is None


@pytest.mark.asyncio
async def test_get_price_server_error_raises(client):
    with respx.mock as rs:
        rs.get(host="quotes.test", path="/v8/finance/chart/AAPL").respond(500)

        with pytest.raises(QuoteProviderError) as exc_info:
            await client.get_price("AAPL")

        assert exc_info.value.status_code == 500
        assert "500" in str(exc_info.value)


@pytest.mark.asyncio
async def test_get_price_transport_error_raises(client):
    with respx.mock as rs:
        rs.get(host="quotes.test", path="/v8/finance/chart/AAPL").mock(side_effect=httpx.ConnectError("boom"))

        with pytest.raises(QuoteProviderError) as exc_info:
            await client.get_price("AAPL")

        assert exc_info.value.status_code is None
        assert "boom" in str(exc_info.value)


@pytest.mark.asyncio
async def test_get_price_invalid_json_raises(client):
    with respx.mock as rs:
        rs.get(host="quotes.test", path="/v8/finance/chart/AAPL").respond(200, text="<html>rate limited</html>")

        with pytest.raises(QuoteProviderError):
            await client.get_price("AAPL")


@pytest.mark.asyncio
async def test_search_symbols_takes_first_candidates(client):
    payload = {
        "quotes": [
            {"symbol": "AAPL"},
            {"longname": "no symbol here"},
            {"symbol": "AAPL.MX"},
            {"symbol": "APC.F"},
            {"symbol": "AAPL.BA"},
        ]
    }
    with respx.mock as rs:
        route = rs.get(host="quotes.test", path="/v1/finance/search").respond(200, json=payload)

        symbols = await client.search_symbols("apple")

        assert symbols == ["AAPL", "AAPL.MX", "APC.F"]
        assert route.calls.last.request.url.params["q"] == "apple"


@pytest.mark.asyncio
async def test_search_symbols_without_quotes_is_empty(client):
    with respx.mock as rs:
        rs.get(host="quotes.test", path="/v1/finance/search").respond(200, json={"news": []})

        assert await client.search_symbols("zzzz") == []


@pytest.mark.asyncio
async def test_search_symbols_error_raises(client):
    with respx.mock as rs:
        rs.get(host="quotes.test", path="/v1/finance/search").respond(503)

        with pytest.raises(QuoteProviderError):
            await client.search_symbols("apple")


def test_extract_price_shapes():
    assert extract_price(_chart(99.5)) == 99.5
    assert extract_price(_chart(7)) == 7.0
    assert extract_price(_chart("12.0")) is None
    assert extract_price(_chart(True)) is None
    assert extract_price({"chart": {"result": []}}) is None
    assert extract_price({"chart": {"result": None}}) is None
    assert extract_price([]) is None


def test_format_price_is_shortest_round_trip():
    assert format_price(150.25) == "150.25"
    assert format_price(175.5) == "175.5"
    assert format_price(42.0) == "42"
    assert format_price(0.1 + 0.2) == "0.30000000000000004"


def test_format_price_small_values_stay_positional():
    assert format_price(0.00001234) == "0.00001234"
    assert format_price(0.00005) == "0.00005"
    assert format_price(0.000001) == "0.000001"
    assert format_price(-0.0025) == "-0.0025"
    assert format_price(1e-7) == "1e-07"
