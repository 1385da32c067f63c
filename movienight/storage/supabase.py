"""Store backed by a Supabase project's PostgREST API."""

import re
from collections.abc import Iterable
from datetime import datetime
from typing import Any

import httpx

from movienight.errors import DuplicateKeyError, StorageError, StorageUnavailable
from movienight.logging import get_logger
from movienight.models import Ballot, Candidate, Night
from movienight.storage import register_store
from movienight.storage.base import Store

log = get_logger(__name__)


@register_store
class SupabaseStore(Store):
    """Talks to the movie_nights, submissions and votes tables over HTTP.

    Tables:
        movie_nights(night_id PK, date, movie_id)
        submissions(submission_id PK, night_id FK, user_id, movie_id,
                    movie_title, created_at)
        votes(vote_id PK, submission_id FK, user_id, rank)

    URL formats:
        https://<project>.supabase.co
        supabase+http://localhost:54321   (self-hosted / local dev)
    """

    URL_PATTERN = re.compile(
        r"^(https://[a-z0-9-]+\.supabase\.co/?"
        r"|supabase\+https?://.+)$"
    )

    EXAMPLE_URL = "https://<project>.supabase.co"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(
            base_url=f"{self.base_url}/rest/v1",
            timeout=timeout,
        )
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
        }

    @classmethod
    def can_open(cls, url: str) -> bool:
        return bool(cls.URL_PATTERN.match(url))

    @classmethod
    def open(cls, url: str, **options) -> "SupabaseStore":
        api_key = options.get("api_key")
        if not api_key:
            raise StorageError("A Supabase store needs an API key (MOVIENIGHT_SUPABASE_KEY)")
        if url.startswith("supabase+"):
            url = url[len("supabase+"):]
        return cls(url, api_key, timeout=options.get("timeout", 30.0))

    def close(self) -> None:
        self._client.close()

    # --- plumbing ---

    def _request(
        self,
        method: str,
        table: str,
        params: dict[str, str] | None = None,
        json: Any = None,
        prefer: str | None = None,
    ) -> list[dict[str, Any]]:
        headers = dict(self._headers)
        if prefer:
            headers["Prefer"] = prefer
        try:
            response = self._client.request(
                method, f"/{table}", params=params, json=json, headers=headers,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            log.warning("store_http_error", table=table, method=method, status=status)
            if status == 409:
                raise DuplicateKeyError(f"Duplicate key in {table}") from e
            if status >= 500:
                raise StorageUnavailable(f"Store error {status} on {table}") from e
            raise StorageError(f"Store rejected {method} on {table}: {status}") from e
        except httpx.RequestError as e:
            log.warning("store_unreachable", table=table, method=method, error=str(e))
            raise StorageUnavailable(f"Error reaching store: {e}") from e

        if not response.content:
            return []
        return response.json()

    @staticmethod
    def _in(ids: Iterable[int]) -> str:
        return "in.(" + ",".join(str(i) for i in ids) + ")"

    @staticmethod
    def _night(row: dict[str, Any]) -> Night:
        movie = row.get("movie_id")
        return Night(
            night_id=row["night_id"],
            created_at=datetime.fromisoformat(row["date"]),
            movie_ref=str(movie) if movie is not None else None,
        )

    @staticmethod
    def _candidate(row: dict[str, Any]) -> Candidate:
        created = row.get("created_at")
        return Candidate(
            candidate_id=row["submission_id"],
            night_id=row["night_id"],
            user_id=row["user_id"],
            movie_ref=str(row["movie_id"]),
            title=row.get("movie_title"),
            created_at=datetime.fromisoformat(created) if created else None,
        )

    @staticmethod
    def _ballot(row: dict[str, Any]) -> Ballot:
        return Ballot(
            candidate_id=row["submission_id"],
            user_id=row["user_id"],
            rank=row["rank"],
        )

    # --- nights ---

    def get_night(self, night_id: int) -> Night | None:
        rows = self._request("GET", "movie_nights", params={
            "select": "*",
            "night_id": f"eq.{night_id}",
        })
        return self._night(rows[0]) if rows else None

    def create_night(self, night_id: int, created_at: datetime) -> Night:
        rows = self._request(
            "POST", "movie_nights",
            json={"night_id": night_id, "date": created_at.isoformat(), "movie_id": None},
            prefer="return=representation",
        )
        if not rows:
            return Night(night_id=night_id, created_at=created_at)
        return self._night(rows[0])

    def set_night_movie(self, night_id: int, movie_ref: str | None) -> None:
        self._request(
            "PATCH", "movie_nights",
            params={"night_id": f"eq.{night_id}"},
            json={"movie_id": movie_ref},
            prefer="return=minimal",
        )

    # --- candidates ---

    def list_candidates(self, night_id: int) -> list[Candidate]:
        rows = self._request("GET", "submissions", params={
            "select": "*",
            "night_id": f"eq.{night_id}",
            "order": "submission_id.asc",
        })
        return [self._candidate(row) for row in rows]

    def get_candidate(self, candidate_id: int) -> Candidate | None:
        rows = self._request("GET", "submissions", params={
            "select": "*",
            "submission_id": f"eq.{candidate_id}",
        })
        return self._candidate(rows[0]) if rows else None

    def create_candidate(
        self, night_id: int, user_id: int, movie_ref: str, title: str | None = None,
    ) -> Candidate:
        rows = self._request(
            "POST", "submissions",
            json={
                "night_id": night_id,
                "user_id": user_id,
                "movie_id": movie_ref,
                "movie_title": title,
            },
            prefer="return=representation",
        )
        if not rows:
            raise StorageError("Store did not return the new submission")
        return self._candidate(rows[0])

    def delete_candidate(self, candidate_id: int, owner_id: int) -> bool:
        rows = self._request(
            "DELETE", "submissions",
            params={
                "submission_id": f"eq.{candidate_id}",
                "user_id": f"eq.{owner_id}",
            },
            prefer="return=representation",
        )
        return bool(rows)

    # --- ballots ---

    def list_ballots(
        self,
        user_id: int | None = None,
        candidate_ids: Iterable[int] | None = None,
    ) -> list[Ballot]:
        params = {"select": "submission_id,user_id,rank", "order": "vote_id.asc"}
        if user_id is not None:
            params["user_id"] = f"eq.{user_id}"
        if candidate_ids is not None:
            candidate_ids = list(candidate_ids)
            if not candidate_ids:
                return []
            params["submission_id"] = self._in(candidate_ids)
        return [self._ballot(row) for row in self._request("GET", "votes", params=params)]

    def delete_ballots(self, user_id: int, candidate_ids: Iterable[int]) -> None:
        candidate_ids = list(candidate_ids)
        if not candidate_ids:
            return
        self._request(
            "DELETE", "votes",
            params={"user_id": f"eq.{user_id}", "submission_id": self._in(candidate_ids)},
            prefer="return=minimal",
        )

    def insert_ballots(self, ballots: Iterable[Ballot]) -> None:
        rows = [
            {"submission_id": b.candidate_id, "user_id": b.user_id, "rank": b.rank}
            for b in ballots
        ]
        if not rows:
            return
        self._request("POST", "votes", json=rows, prefer="return=minimal")
