"""Tests for the TMDB metadata provider."""

from datetime import date

import httpx
import pytest

from movienight.errors import MetadataError
from movienight.metadata.tmdb import TMDBMetadata

SEARCH_RESPONSE = {
    "page": 1,
    "results": [
        {"id": 550, "title": "Fight Club", "release_date": "1999-10-15"},
        {"id": 14476, "title": "Clubbed", "release_date": ""},
    ],
}

DETAILS_RESPONSE = {
    "id": 550,
    "title": "Fight Club",
    "release_date": "1999-10-15",
    "overview": "A ticking-time-bomb insomniac...",
    "poster_path": "/pB8BM7pdSp6B6Ih7QZ4DrQ3PmJK.jpg",
    "runtime": 139,
}


def make_provider(handler) -> TMDBMetadata:
    client = httpx.Client(
        base_url="https://api.themoviedb.org/3",
        transport=httpx.MockTransport(handler),
    )
    return TMDBMetadata("tmdb-key", client=client)


class TestSearch:
    def test_search(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=SEARCH_RESPONSE)

        results = make_provider(handler).search("fight club")
        assert [r.external_id for r in results] == ["550", "14476"]
        assert results[0].title == "Fight Club"
        assert results[0].release_date == date(1999, 10, 15)
        assert results[1].release_date is None

        request = seen[0]
        assert request.url.path == "/3/search/movie"
        assert request.url.params["query"] == "fight club"
        assert request.url.params["api_key"] == "tmdb-key"

    def test_blank_query(self):
        def handler(request):
            raise AssertionError("should not be called")

        assert make_provider(handler).search("   ") == []

    def test_to_dict(self):
        provider = make_provider(lambda request: httpx.Response(200, json=SEARCH_RESPONSE))
        assert provider.search("fight")[0].to_dict() == {
            "external_id": "550",
            "title": "Fight Club",
            "release_date": "1999-10-15",
        }


class TestFetchDetails:
    def test_fetch_details(self):
        provider = make_provider(lambda request: httpx.Response(200, json=DETAILS_RESPONSE))
        details = provider.fetch_details("550")
        assert details.title == "Fight Club"
        assert details.release_date == date(1999, 10, 15)
        assert details.runtime_minutes == 139
        assert details.poster_ref == "/pB8BM7pdSp6B6Ih7QZ4DrQ3PmJK.jpg"
        assert details.overview.startswith("A ticking")

    def test_unknown_runtime(self):
        body = {**DETAILS_RESPONSE, "runtime": 0, "poster_path": None}
        provider = make_provider(lambda request: httpx.Response(200, json=body))
        details = provider.fetch_details("550")
        assert details.runtime_minutes is None
        assert details.poster_ref is None

    def test_not_found(self):
        provider = make_provider(lambda request: httpx.Response(404, json={"status_code": 34}))
        with pytest.raises(MetadataError, match="404"):
            provider.fetch_details("0")

    def test_unreachable(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(MetadataError, match="timed out"):
            make_provider(handler).fetch_details("550")
