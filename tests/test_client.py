import json

import httpx
import pytest

from orca_mcp.client import HUNT_ENDPOINT, HuntApiClient
from orca_mcp.errors import (
    AuthenticationFailureError,
    BadRequestError,
    HuntApiError,
    NetworkError,
    RateLimitedError,
    UpstreamServerError,
)
from orca_mcp.http_client import create_hunt_client
from orca_mcp.models import MAX_HUNT_DOCUMENTS
from orca_mcp.settings import Settings
from tests.conftest import VALID_TOKEN, SleepRecorder


def _document(index: int) -> dict:
    return {
        "datasetId": f"ds-{index}",
        "id": f"rec-{index}",
        "names": [f"Acme {index}"],
        "primaryName": f"Acme {index}",
        "rawData": "details",
        "values": ["US"],
        "dataset": {
            "authorities": ["OFAC"],
            "section": "Entities",
            "exactListName": "Demo List",
            "implementingOrganization": "Demo Org",
        },
        "tabularData": {"headers": ["country"], "fields": ["US"]},
    }


def _build_client(handler, sleep: SleepRecorder | None = None) -> HuntApiClient:
    settings = Settings(api_token=VALID_TOKEN, api_url="http://mock.local", max_retries=3)
    return HuntApiClient.from_settings(
        settings,
        transport=httpx.MockTransport(handler),
        sleep=sleep or SleepRecorder(),
    )


def test_http_client_binds_configuration() -> None:
    settings = Settings(api_token=VALID_TOKEN, api_url="https://hunt.example.test", timeout_ms=15000)

    client = create_hunt_client(settings)

    assert client.base_url.host == "hunt.example.test"
    assert client.headers["x-api-key"] == VALID_TOKEN
    assert client.headers["content-type"] == "application/json"
    assert "authorization" not in client.headers
    assert client.timeout.read == 15.0


@pytest.mark.anyio
async def test_search_success() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.url.path == HUNT_ENDPOINT
        assert request.headers["x-api-key"] == VALID_TOKEN
        assert json.loads(request.content.decode()) == {"query": "Acme Corp"}
        return httpx.Response(
            200,
            json={"query": "Acme Corp", "nextToken": "page-2", "huntDocuments": [_document(1)]},
        )

    client = _build_client(handler)
    result = await client.search("Acme Corp")

    assert result.query == "Acme Corp"
    assert result.next_token == "page-2"
    assert result.hunt_documents[0].primary_name == "Acme 1"
    assert result.hunt_documents[0].dataset.exact_list_name == "Demo List"
    assert result.hunt_documents[0].tabular_data.field_values == ["US"]
    await client.aclose()


@pytest.mark.anyio
async def test_search_forwards_next_token_verbatim() -> None:
    bodies: list[dict] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content.decode()))
        return httpx.Response(200, json={"query": "Acme Corp", "huntDocuments": []})

    client = _build_client(handler)
    await client.search("Acme Corp", next_token="enc+Token/==")

    assert bodies == [{"query": "Acme Corp", "nextToken": "enc+Token/=="}]
    await client.aclose()


@pytest.mark.anyio
async def test_search_echoes_query_when_upstream_omits_it() -> None:
    client = _build_client(lambda request: httpx.Response(200, json={"huntDocuments": []}))

    result = await client.search("Acme Corp")

    assert result.query == "Acme Corp"
    assert result.hunt_documents == []
    await client.aclose()


@pytest.mark.anyio
async def test_search_caps_documents() -> None:
    documents = [_document(index) for index in range(MAX_HUNT_DOCUMENTS + 5)]
    client = _build_client(
        lambda request: httpx.Response(200, json={"query": "Acme", "huntDocuments": documents})
    )

    result = await client.search("Acme")

    assert len(result.hunt_documents) == MAX_HUNT_DOCUMENTS
    await client.aclose()


@pytest.mark.anyio
async def test_authentication_and_rate_limit_errors_are_distinct() -> None:
    auth_client = _build_client(lambda request: httpx.Response(401, json={"message": "nope"}))
    limited_client = _build_client(lambda request: httpx.Response(429))

    with pytest.raises(AuthenticationFailureError) as auth_exc:
        await auth_client.search("Acme")
    with pytest.raises(RateLimitedError) as limit_exc:
        await limited_client.search("Acme")

    assert "Authentication failed" in str(auth_exc.value)
    assert "Rate limit exceeded" in str(limit_exc.value)
    assert str(auth_exc.value) != str(limit_exc.value)
    await auth_client.aclose()
    await limited_client.aclose()


@pytest.mark.anyio
async def test_bad_request_carries_upstream_detail() -> None:
    client = _build_client(
        lambda request: httpx.Response(400, json={"message": "query too short"})
    )

    with pytest.raises(BadRequestError) as exc:
        await client.search("A")

    assert exc.value.detail == "query too short"
    assert str(exc.value) == "Invalid request: query too short"
    await client.aclose()


@pytest.mark.anyio
async def test_bad_request_without_detail() -> None:
    client = _build_client(lambda request: httpx.Response(400, text="oops"))

    with pytest.raises(BadRequestError) as exc:
        await client.search("A")

    assert str(exc.value) == "Invalid request: Bad request parameters"
    await client.aclose()


@pytest.mark.anyio
async def test_server_errors_surface_after_retries() -> None:
    sleep = SleepRecorder()
    client = _build_client(lambda request: httpx.Response(502, text="Bad gateway from mock"), sleep)

    with pytest.raises(UpstreamServerError) as exc:
        await client.search("Acme")

    assert "502" in str(exc.value)
    assert "Bad gateway from mock" in str(exc.value)
    assert sleep.delays == [1.0, 2.0, 3.0]
    await client.aclose()


@pytest.mark.anyio
async def test_other_statuses_are_wrapped() -> None:
    client = _build_client(lambda request: httpx.Response(404, text="no such route"))

    with pytest.raises(HuntApiError) as exc:
        await client.search("Acme")

    assert type(exc.value) is HuntApiError
    assert "HUNT API error (404)" in str(exc.value)
    await client.aclose()


@pytest.mark.anyio
async def test_timeout_surface_readable_error() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.TimeoutException("mock timeout", request=request)

    sleep = SleepRecorder()
    client = _build_client(handler, sleep)
    with pytest.raises(NetworkError) as exc:
        await client.search("Acme")
    assert "timed out" in str(exc.value)
    assert sleep.delays == []
    await client.aclose()


@pytest.mark.anyio
async def test_invalid_json_is_reported() -> None:
    client = _build_client(lambda request: httpx.Response(200, text="<html>"))

    with pytest.raises(HuntApiError) as exc:
        await client.search("Acme")

    assert "invalid JSON" in str(exc.value)
    await client.aclose()


@pytest.mark.anyio
async def test_validation_rejects_empty_query() -> None:
    client = _build_client(lambda request: httpx.Response(200))
    with pytest.raises(ValueError):
        await client.search("   ")
    await client.aclose()


@pytest.mark.anyio
async def test_search_sends_query_untouched() -> None:
    bodies: list[dict] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content.decode()))
        return httpx.Response(200, json={"huntDocuments": []})

    client = _build_client(handler)
    result = await client.search("  Acme Corp\t", next_token=" tok== ")

    assert bodies == [{"query": "  Acme Corp\t", "nextToken": " tok== "}]
    assert result.query == "  Acme Corp\t"
    await client.aclose()


@pytest.mark.anyio
async def test_search_accepts_numeric_scalars() -> None:
    document = _document(1)
    document["id"] = 12345
    document["datasetId"] = 7
    document["values"] = [1, 2.5]
    document["tabularData"] = {"headers": ["year"], "fields": [2020]}
    client = _build_client(
        lambda request: httpx.Response(200, json={"query": "Acme", "huntDocuments": [document]})
    )

    result = await client.search("Acme")

    parsed = result.hunt_documents[0]
    assert parsed.id == "12345"
    assert parsed.dataset_id == "7"
    assert parsed.values == ["1", "2.5"]
    assert parsed.tabular_data.field_values == ["2020"]
    await client.aclose()
