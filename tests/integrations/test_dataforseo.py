"""Tests for the DataForSEO client.

Requests are answered by httpx.MockTransport, so no network access is needed.
Tests cover request payloads, response parsing and every failure level:
transport, HTTP status, request status_code and task status_code.
"""

import base64
import json
from typing import Any
from unittest.mock import patch

import httpx
import pytest

from seo_platform.integrations.dataforseo import (
    SEARCH_VOLUME_ENDPOINT,
    SERP_ENDPOINT,
    DataForSEOClient,
    location_for_country,
)


def _client(handler: Any) -> DataForSEOClient:
    return DataForSEOClient(
        api_login="login@example.com",
        api_password="secret",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.parametrize(
    ("country", "code"),
    [
        ("UK", 2826),
        ("us", 2840),
        ("UAE", 2784),
        ("AU", 2036),
        ("CA", 2124),
        ("SG", 2702),
        ("HK", 2344),
        ("FR", 2826),
        (None, 2826),
    ],
)
def test_location_for_country(country: str | None, code: int) -> None:
    assert location_for_country(country) == code


class TestKeywordVolume:
    async def test_sends_one_task_with_basic_auth(
        self, make_dataforseo_response: Any
    ) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return make_dataforseo_response([])

        client = _client(handler)
        result = await client.get_keyword_volume(["a", "b"], 2840)
        await client.close()

        assert result.success is True
        request = seen[0]
        assert request.method == "POST"
        assert request.url.path == SEARCH_VOLUME_ENDPOINT
        assert json.loads(request.content) == [
            {"keywords": ["a", "b"], "location_code": 2840, "language_code": "en"}
        ]
        expected = base64.b64encode(b"login@example.com:secret").decode()
        assert request.headers["authorization"] == f"Basic {expected}"

    async def test_parses_records(self, make_dataforseo_response: Any) -> None:
        records = [
            {
                "keyword": "sipp",
                "search_volume": 2400,
                "cpc": 3.1,
                "competition": "MEDIUM",
                "competition_index": 45,
                "keyword_difficulty": 30,
            },
            {"keyword": "qrops", "search_volume": None, "competition": 0.25},
        ]
        client = _client(lambda request: make_dataforseo_response(records, cost=0.1))

        result = await client.get_keyword_volume(["sipp", "qrops"], 2826)

        assert result.success is True
        assert result.cost == 0.1
        sipp, qrops = result.keywords
        assert sipp.search_volume == 2400
        assert sipp.cpc == 3.1
        assert sipp.competition == 0.45
        assert sipp.keyword_difficulty == 30
        assert qrops.search_volume is None
        assert qrops.competition == 0.25
        assert qrops.cpc is None

    async def test_empty_keyword_list(self) -> None:
        client = _client(lambda request: httpx.Response(200))

        result = await client.get_keyword_volume([], 2826)

        assert result.success is False
        assert result.error == "No keywords provided"

    async def test_http_error(self) -> None:
        client = _client(lambda request: httpx.Response(500, text="boom"))

        result = await client.get_keyword_volume(["sipp"], 2826)

        assert result.success is False
        assert result.error == "HTTP 500"

    async def test_request_status_error(self, make_dataforseo_response: Any) -> None:
        client = _client(lambda request: make_dataforseo_response([], status_code=40100))

        result = await client.get_keyword_volume(["sipp"], 2826)

        assert result.success is False
        assert result.error is not None
        assert "40100" in result.error

    async def test_task_status_error(self, make_dataforseo_response: Any) -> None:
        client = _client(
            lambda request: make_dataforseo_response([], task_status_code=40501)
        )

        result = await client.get_keyword_volume(["sipp"], 2826)

        assert result.success is False
        assert result.error == "Task error 40501: Task failed."

    async def test_malformed_json(self) -> None:
        client = _client(lambda request: httpx.Response(200, text="not json"))

        result = await client.get_keyword_volume(["sipp"], 2826)

        assert result.success is False
        assert result.error == "Malformed JSON response"

    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = _client(handler)

        result = await client.get_keyword_volume(["sipp"], 2826)

        assert result.success is False
        assert result.error is not None
        assert result.error.startswith("Request failed:")

    async def test_missing_credentials(self, make_settings: Any) -> None:
        settings = make_settings(dataforseo_api_login=None, dataforseo_api_password=None)
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200)

        with patch(
            "seo_platform.integrations.dataforseo.get_settings", return_value=settings
        ):
            client = DataForSEOClient(transport=httpx.MockTransport(handler))

        result = await client.get_keyword_volume(["sipp"], 2826)

        assert client.available is False
        assert result.success is False
        assert result.error == "DataForSEO credentials not configured"
        assert calls == []


class TestSerp:
    async def test_keeps_organic_items_in_order(
        self, make_dataforseo_response: Any
    ) -> None:
        seen: list[httpx.Request] = []
        items = [
            {"type": "paid", "rank_absolute": 1, "url": "https://ad.com/"},
            {
                "type": "organic",
                "rank_absolute": 2,
                "url": "https://www.hoxtonwealth.com/",
                "title": "Hoxton",
                "domain": "www.hoxtonwealth.com",
            },
            {"type": "people_also_ask", "rank_absolute": 3},
            {
                "type": "organic",
                "rank_absolute": 4,
                "url": "https://rival.com/",
                "title": "Rival",
            },
        ]

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return make_dataforseo_response([{"items": items}])

        client = _client(handler)
        result = await client.get_serp("qrops", 2784)

        assert result.success is True
        assert [(r.position, r.url) for r in result.results] == [
            (2, "https://www.hoxtonwealth.com/"),
            (4, "https://rival.com/"),
        ]
        assert result.results[0].title == "Hoxton"
        assert seen[0].url.path == SERP_ENDPOINT
        assert json.loads(seen[0].content) == [
            {
                "keyword": "qrops",
                "location_code": 2784,
                "language_code": "en",
                "depth": 100,
            }
        ]

    async def test_empty_result(self, make_dataforseo_response: Any) -> None:
        client = _client(lambda request: make_dataforseo_response([]))

        result = await client.get_serp("qrops", 2826)

        assert result.success is True
        assert result.results == []

    async def test_failure_is_reported_not_raised(self) -> None:
        client = _client(lambda request: httpx.Response(503))

        result = await client.get_serp("qrops", 2826)

        assert result.success is False
        assert result.keyword == "qrops"
        assert result.error == "HTTP 503"


class TestMalformedPayloads:
    async def test_null_task_is_a_failure(self) -> None:
        client = _client(
            lambda request: httpx.Response(
                200, json={"status_code": 20000, "tasks": [None]}
            )
        )

        result = await client.get_keyword_volume(["sipp"], 2826)

        assert result.success is False
        assert result.error == "Unexpected response shape"

    async def test_missing_tasks_is_a_failure(self) -> None:
        client = _client(
            lambda request: httpx.Response(200, json={"status_code": 20000})
        )

        result = await client.get_serp("qrops", 2826)

        assert result.success is False
        assert result.error == "Unexpected response shape"

    async def test_non_list_result_is_a_failure(self) -> None:
        body = {
            "status_code": 20000,
            "tasks": [{"status_code": 20000, "result": {"items": []}}],
        }
        client = _client(lambda request: httpx.Response(200, json=body))

        result = await client.get_keyword_volume(["sipp"], 2826)

        assert result.success is False

    async def test_null_serp_result_is_a_failure(
        self, make_dataforseo_response: Any
    ) -> None:
        client = _client(lambda request: make_dataforseo_response([None]))

        result = await client.get_serp("qrops", 2826)

        assert result.success is False
        assert result.keyword == "qrops"
        assert result.error == "Unexpected response shape"

    async def test_non_dict_serp_items_are_skipped(
        self, make_dataforseo_response: Any
    ) -> None:
        items = [
            None,
            "junk",
            {"type": "organic", "rank_absolute": 1, "url": "https://a.com/"},
        ]
        client = _client(lambda request: make_dataforseo_response([{"items": items}]))

        result = await client.get_serp("qrops", 2826)

        assert result.success is True
        assert [r.url for r in result.results] == ["https://a.com/"]

    async def test_non_dict_volume_records_are_skipped(
        self, make_dataforseo_response: Any
    ) -> None:
        client = _client(
            lambda request: make_dataforseo_response([None, {"keyword": "sipp"}])
        )

        result = await client.get_keyword_volume(["sipp"], 2826)

        assert result.success is True
        assert [k.keyword for k in result.keywords] == ["sipp"]
