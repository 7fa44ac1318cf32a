"""Tests for the enrichment services, below the HTTP layer."""

from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from seo_platform.core.errors import ExternalApiError, ValidationError
from seo_platform.models import Keyword
from seo_platform.schemas.enrich import InlineKeyword, KeywordEnrichRequest
from seo_platform.services.enrichment import (
    KeywordEnrichmentService,
    SerpEnrichmentService,
    WorkingKeyword,
    group_by_country,
    match_keyword,
)


def _kw(text: str, country: str, id: str | None = None) -> WorkingKeyword:
    return WorkingKeyword(id=id, keyword_text=text, country=country)


def test_group_by_country_keeps_order() -> None:
    keywords = [_kw("a", "UK"), _kw("b", "US"), _kw("c", "UK"), _kw("d", "AU")]

    groups = group_by_country(keywords)

    assert list(groups) == ["UK", "US", "AU"]
    assert [kw.keyword_text for kw in groups["UK"]] == ["a", "c"]


def test_match_keyword_first_match_wins() -> None:
    group = [_kw("Pension", "UK", id="1"), _kw("pension", "UK", id="2")]

    assert match_keyword("PENSION", group).id == "1"  # type: ignore[union-attr]
    assert match_keyword("sipp", group) is None


async def _seed(session: AsyncSession, *texts: str, country: str = "UK") -> list[str]:
    keywords = [Keyword(keyword_text=text, country=country) for text in texts]
    session.add_all(keywords)
    await session.commit()
    return [kw.id for kw in keywords]


class TestKeywordEnrichmentService:
    async def test_resolve_prefers_ids_and_keeps_order(
        self, db_session: AsyncSession, mock_dataforseo: Any
    ) -> None:
        first, second = await _seed(db_session, "alpha", "beta")
        service = KeywordEnrichmentService(db_session, mock_dataforseo.client(), "UK")

        working = await service.resolve(
            KeywordEnrichRequest(
                keyword_ids=[second, "bogus", first, second],
                keywords=[InlineKeyword(text="ignored")],
            )
        )

        assert [kw.keyword_text for kw in working] == ["beta", "alpha"]

    async def test_resolve_inline_uses_default_country(
        self, db_session: AsyncSession, mock_dataforseo: Any
    ) -> None:
        service = KeywordEnrichmentService(db_session, mock_dataforseo.client(), "US")

        working = await service.resolve(
            KeywordEnrichRequest(
                keywords=[InlineKeyword(text="a"), InlineKeyword(text="b", country="uae")]
            )
        )

        assert [(kw.id, kw.country) for kw in working] == [(None, "US"), (None, "UAE")]

    async def test_resolve_empty_lists(
        self, db_session: AsyncSession, mock_dataforseo: Any
    ) -> None:
        service = KeywordEnrichmentService(db_session, mock_dataforseo.client(), "UK")

        with pytest.raises(ValidationError, match="No keywords found to enrich"):
            await service.resolve(KeywordEnrichRequest(keyword_ids=[], keywords=[]))

    async def test_unmatched_record_is_returned_but_not_stored(
        self,
        db_session: AsyncSession,
        mock_dataforseo: Any,
        make_dataforseo_response: Any,
    ) -> None:
        (keyword_id,) = await _seed(db_session, "alpha")
        mock_dataforseo.handler = lambda endpoint, task: make_dataforseo_response(
            [
                {"keyword": "alpha", "search_volume": 10},
                {"keyword": "alpha extra", "search_volume": 5},
            ]
        )
        service = KeywordEnrichmentService(db_session, mock_dataforseo.client(), "UK")
        stored: list[str] = []

        async def record(keyword_id: str, entry: Any) -> None:
            stored.append(keyword_id)

        service._store_metric = record  # type: ignore[method-assign]

        results = await service.enrich(KeywordEnrichRequest(keyword_ids=[keyword_id]))

        assert [r.keyword for r in results] == ["alpha", "alpha extra"]
        assert stored == [keyword_id]

    async def test_second_group_failure_fails_request(
        self,
        db_session: AsyncSession,
        mock_dataforseo: Any,
        make_dataforseo_response: Any,
    ) -> None:
        def handler(endpoint: str, task: dict[str, Any]) -> Any:
            if task["location_code"] == 2840:
                return make_dataforseo_response([], task_status_code=40000)
            return make_dataforseo_response([{"keyword": "a"}])

        mock_dataforseo.handler = handler
        service = KeywordEnrichmentService(db_session, mock_dataforseo.client(), "UK")

        with pytest.raises(ExternalApiError):
            await service.enrich(
                KeywordEnrichRequest(
                    keywords=[
                        InlineKeyword(text="a", country="UK"),
                        InlineKeyword(text="b", country="US"),
                    ]
                )
            )

        assert len(mock_dataforseo.calls) == 2


class TestSerpEnrichmentService:
    async def test_custom_primary_domain(
        self,
        db_session: AsyncSession,
        mock_dataforseo: Any,
        make_dataforseo_response: Any,
    ) -> None:
        (keyword_id,) = await _seed(db_session, "alpha", country="SG")
        mock_dataforseo.handler = lambda endpoint, task: make_dataforseo_response(
            [
                {
                    "items": [
                        {"type": "organic", "rank_absolute": 1, "url": "https://a.com/"},
                        {"type": "organic", "rank_absolute": 2, "url": "https://me.io/"},
                        {"type": "organic", "rank_absolute": 5, "url": "https://me.io/b"},
                    ]
                }
            ]
        )
        service = SerpEnrichmentService(
            db_session, mock_dataforseo.client(), primary_domain="me.io"
        )

        results, meta = await service.enrich([keyword_id])

        assert results[0].hoxton_position == 2  # type: ignore[union-attr]
        assert meta == {
            "keywords_processed": 1,
            "serp_records": 3,
            "competitor_records": 0,
        }
        assert mock_dataforseo.calls[0]["task"]["location_code"] == 2702
