"""Tests for the Elasticsearch post index adapter."""

import asyncio

import pytest

from ..models import Location, Post
from .elasticsearch import POST_MAPPINGS, PostIndex, ensure_index, geo_distance_query
from .errors import IndexQueryError, IndexWriteError


class FakeIndices:
    def __init__(self, exists: bool):
        self._exists = exists
        self.created: list[dict] = []

    async def exists(self, *, index):
        return self._exists

    async def create(self, *, index, mappings=None, **kwargs):
        self.created.append({"index": index, "mappings": mappings})
        self._exists = True


class FakeEs:
    def __init__(self, exists: bool = True, search_response=None, fail: bool = False, delay: float = 0):
        self.indices = FakeIndices(exists)
        self.search_response = search_response or {"hits": {"hits": []}}
        self.fail = fail
        self.delay = delay
        self.index_calls: list[dict] = []
        self.search_calls: list[dict] = []

    async def index(self, *, index, id, document, refresh=None, **kwargs):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise ConnectionError("cluster unavailable")
        self.index_calls.append({"index": index, "id": id, "document": document, "refresh": refresh})
        return {"result": "created"}

    async def search(self, *, index=None, query=None, size=None, **kwargs):
        if self.fail:
            raise ConnectionError("cluster unavailable")
        self.search_calls.append({"index": index, "query": query, "size": size})
        return self.search_response


def make_post(**overrides) -> Post:
    fields = {
        "user": "alice",
        "message": "hello",
        "location": Location(lat=37.0, lon=-120.0),
        "url": "https://media.example/abc",
    }
    fields.update(overrides)
    return Post(**fields)


def test_geo_distance_query_shape():
    assert geo_distance_query(37.0, -120.0, "1km") == {
        "geo_distance": {"distance": "1km", "location": {"lat": 37.0, "lon": -120.0}}
    }


class TestEnsureIndex:
    @pytest.mark.asyncio
    async def test_creates_missing_index_with_geo_point_mapping(self):
        es = FakeEs(exists=False)
        assert await ensure_index(es, "around") is True
        assert es.indices.created == [{"index": "around", "mappings": POST_MAPPINGS}]
        assert POST_MAPPINGS["properties"]["location"]["type"] == "geo_point"

    @pytest.mark.asyncio
    async def test_leaves_existing_index_alone(self):
        es = FakeEs(exists=True)
        assert await ensure_index(es, "around") is False
        assert es.indices.created == []


class TestPostIndex:
    @pytest.mark.asyncio
    async def test_put_forces_refresh(self):
        es = FakeEs()
        await PostIndex(es, "around").put("id-1", make_post())

        assert es.index_calls == [
            {
                "index": "around",
                "id": "id-1",
                "document": {
                    "user": "alice",
                    "message": "hello",
                    "location": {"lat": 37.0, "lon": -120.0},
                    "url": "https://media.example/abc",
                },
                "refresh": True,
            }
        ]

    @pytest.mark.asyncio
    async def test_put_failure_raises_index_write_error(self):
        with pytest.raises(IndexWriteError):
            await PostIndex(FakeEs(fail=True), "around").put("id-1", make_post())

    @pytest.mark.asyncio
    async def test_put_timeout_raises_index_write_error(self):
        index = PostIndex(FakeEs(delay=1), "around", timeout=0.01)
        with pytest.raises(IndexWriteError):
            await index.put("id-1", make_post())

    @pytest.mark.asyncio
    async def test_query_returns_hits_and_bounds_size(self):
        hits = [{"_id": "a", "_source": {}}, {"_id": "b", "_source": {}}]
        es = FakeEs(search_response={"took": 3, "hits": {"hits": hits}})
        result = await PostIndex(es, "around", max_results=25).query({"match_all": {}})

        assert result == hits
        assert es.search_calls == [{"index": "around", "query": {"match_all": {}}, "size": 25}]

    @pytest.mark.asyncio
    async def test_query_failure_raises_index_query_error(self):
        with pytest.raises(IndexQueryError):
            await PostIndex(FakeEs(fail=True), "around").query({"match_all": {}})

    @pytest.mark.asyncio
    async def test_query_rejects_unexpected_response_type(self):
        es = FakeEs(search_response=["not", "a", "dict"])
        with pytest.raises(IndexQueryError):
            await PostIndex(es, "around").query({"match_all": {}})
