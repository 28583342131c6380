"""Tests for VectorIndexService with a mocked Qdrant client."""

import time
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from conftest import make_point
from video_search.services.errors import VectorIndexError
from video_search.services.vector_store import VectorIndexService


def _service(points=None, timeout=5.0):
    client = MagicMock()
    client.query_points.return_value = SimpleNamespace(points=points or [])
    return VectorIndexService(client=client, collection_name="lecture_passages", timeout=timeout)


class TestSearch:

    def test_maps_payload(self):
        service = _service([
            make_point(101, 0.82, {
                "video_id": "abc123", "title": "Intro to Flexbox",
                "timestamp_start": 75.6, "text": "flex containers",
            }),
        ])

        matches = service.search([0.1, 0.2], top_k=10)

        assert len(matches) == 1
        match = matches[0]
        assert match.id == "101"
        assert match.video_id == "abc123"
        assert match.timestamp_start == 75
        service.client.query_points.assert_called_once_with(
            collection_name="lecture_passages", query=[0.1, 0.2], limit=10, with_payload=True
        )

    def test_missing_title_is_none(self):
        service = _service([make_point("p1", 0.5, {"video_id": "abc123", "text": "x"})])
        assert service.search([0.1])[0].title is None

    def test_skips_points_without_video_id(self):
        service = _service([
            make_point("p1", 0.9, {"title": "Orphan", "text": "x"}),
            make_point("p2", 0.8, {"video_id": "abc123", "text": "y"}),
            make_point("p3", 0.7, None),
        ])

        assert [m.id for m in service.search([0.1])] == ["p2"]

    @pytest.mark.parametrize("bad_start", [{"s": 1}, [1, 2], "1e999", float("inf")])
    def test_skips_unparseable_timestamp(self, bad_start):
        """One corrupt point is dropped without failing the whole query."""
        service = _service([
            make_point("p1", 0.9, {"video_id": "abc123", "timestamp_start": bad_start}),
            make_point("p2", 0.8, {"video_id": "abc123", "timestamp_start": 12}),
        ])

        matches = service.search([0.1])

        assert [m.id for m in matches] == ["p2"]
        assert matches[0].timestamp_start == 12

    def test_numeric_video_id_kept(self):
        service = _service([make_point("p1", 0.9, {"video_id": 12345, "text": "x"})])
        assert service.search([0.1])[0].video_id == "12345"

    def test_keeps_index_order(self):
        service = _service([
            make_point("a", 0.9, {"video_id": "v1"}),
            make_point("b", 0.95, {"video_id": "v2"}),
        ])
        assert [m.id for m in service.search([0.1])] == ["a", "b"]


class TestQuery:

    @pytest.mark.asyncio
    async def test_connection_error_wrapped(self):
        service = _service()
        service.client.query_points.side_effect = ConnectionError("refused")

        with pytest.raises(VectorIndexError) as exc_info:
            await service.query([0.1], 10)
        assert "refused" in exc_info.value.details

    @pytest.mark.asyncio
    async def test_timeout(self):
        service = _service(timeout=0.05)

        def slow(**kwargs):
            time.sleep(0.3)
            return SimpleNamespace(points=[])

        service.client.query_points.side_effect = slow
        with pytest.raises(VectorIndexError, match="timed out"):
            await service.query([0.1], 10)


class TestHealthCheck:

    def test_collection_present(self):
        service = _service()
        service.client.get_collections.return_value = SimpleNamespace(
            collections=[SimpleNamespace(name="lecture_passages")]
        )
        assert service.health_check() is True

    def test_unreachable(self):
        service = _service()
        service.client.get_collections.side_effect = ConnectionError("refused")
        assert service.health_check() is False
