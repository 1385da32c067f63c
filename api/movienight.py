"""Vercel serverless function for the movie night engine."""

import json
import sys
from pathlib import Path

# Add the project root to the path so we can import movienight modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from movienight.config import get_settings
from movienight.engine import MovieNight
from movienight.errors import (
    InvalidPhase,
    InvalidRanking,
    MetadataError,
    MovieNightError,
    NotOwner,
    PartialReplacementFailure,
    QuotaExceeded,
    StorageUnavailable,
    UnknownCandidate,
)
from movienight.logging import get_logger, setup_logging
from movienight.metadata.tmdb import TMDBMetadata

log = get_logger(__name__)

# Status codes for errors the engine raises on purpose
ERROR_STATUS = {
    QuotaExceeded: 409,
    InvalidPhase: 409,
    InvalidRanking: 400,
    UnknownCandidate: 404,
    NotOwner: 403,
    PartialReplacementFailure: 503,
    StorageUnavailable: 503,
    MetadataError: 502,
}

_engine: MovieNight | None = None


def get_engine() -> MovieNight:
    """Build the engine once per warm function instance."""
    global _engine
    if _engine is None:
        settings = get_settings()
        setup_logging(settings.log_level)
        metadata = None
        if settings.tmdb_api_key:
            metadata = TMDBMetadata(
                settings.tmdb_api_key,
                base_url=settings.tmdb_base_url,
                timeout=settings.http_timeout,
            )
        _engine = MovieNight(settings, metadata=metadata)
    return _engine


def handler(request):
    """Handle incoming requests.

    Accepts:
    - GET: current phase, night, next transition, submissions and, in the
      winner phase, the outcome
    - POST with JSON body {"action": ..., ...} where action is one of:
        submit   {"user_id", "movie_ref", "title"?}
        withdraw {"user_id", "candidate_id"}
        rank     {"user_id", "ordering": [candidate_id, ...]}
        ranking  {"user_id"}   (current working ordering for the user)
        search   {"query"}
        reveal   {}

    Returns JSON.
    """
    # Handle CORS preflight
    if request.method == "OPTIONS":
        return create_response(
            "",
            status=204,
            headers={
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
                "Access-Control-Allow-Headers": "Content-Type",
            },
        )

    try:
        engine = get_engine()
    except Exception as e:
        # Settings or store setup failed; nothing the client sent is at fault
        log.exception("engine_setup_failed")
        return create_response(
            {"error": f"Server misconfigured: {e}"},
            status=500,
        )

    try:
        if request.method == "GET":
            return create_response(engine.status())

        if request.method != "POST":
            return create_response(
                {"error": "Method not allowed. Use GET or POST."},
                status=405,
            )

        content_type = request.headers.get("content-type", "")
        if "application/json" not in content_type:
            return create_response(
                {"error": f"Unsupported content type: {content_type}"},
                status=400,
            )

        data = json.loads(request.body.decode("utf-8"))
        return dispatch(engine, data)

    except MovieNightError as e:
        status = next(
            (code for cls, code in ERROR_STATUS.items() if isinstance(e, cls)),
            500,
        )
        log.info("request_failed", error=type(e).__name__, status=status)
        body = {"error": str(e), "type": type(e).__name__}
        if isinstance(e, PartialReplacementFailure):
            body["restored"] = e.restored
        return create_response(body, status=status)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        return create_response(
            {"error": f"Invalid JSON: {e}"},
            status=400,
        )
    except Exception as e:
        log.exception("request_crashed")
        return create_response(
            {"error": f"Internal error: {e}"},
            status=500,
        )


def parse_id(value) -> int | None:
    """Return `value` as an id, or None if it isn't one.

    Accepts ints and digit strings; booleans are rejected even though
    JSON true/false decode to bool, a subclass of int.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    return None


def missing(field: str):
    return create_response(
        {"error": f"Missing '{field}' in request body"},
        status=400,
    )


def dispatch(engine: MovieNight, data: dict):
    """Run one POST action against the engine."""
    if not isinstance(data, dict):
        return create_response(
            {"error": "Request body must be a JSON object"},
            status=400,
        )
    action = data.get("action")

    if action == "search":
        if engine.metadata is None:
            return create_response({"error": "Movie search is not configured"}, status=501)
        results = engine.metadata.search(str(data.get("query", "")))
        return create_response({"results": [r.to_dict() for r in results]})

    if action == "reveal":
        return create_response(engine.reveal().to_dict())

    user_id = parse_id(data.get("user_id"))
    if user_id is None:
        return missing("user_id")

    if action == "submit":
        movie_ref = data.get("movie_ref")
        if not movie_ref:
            return missing("movie_ref")
        candidate = engine.submit(user_id, str(movie_ref), title=data.get("title"))
        return create_response(candidate.to_dict(), status=201)

    if action == "withdraw":
        candidate_id = parse_id(data.get("candidate_id"))
        if candidate_id is None:
            return missing("candidate_id")
        engine.withdraw(user_id, candidate_id)
        return create_response("", status=204)

    if action == "ranking":
        return create_response({"ordering": engine.editor(user_id).ordering})

    if action == "rank":
        raw = data.get("ordering")
        ordering = [parse_id(cid) for cid in raw] if isinstance(raw, list) else None
        if ordering is None or None in ordering:
            return create_response(
                {"error": "'ordering' must be a list of candidate ids"},
                status=400,
            )
        ballots = engine.submit_ranking(user_id, ordering)
        return create_response({
            "ranking": [{"candidate_id": b.candidate_id, "rank": b.rank} for b in ballots],
        })

    return create_response(
        {"error": f"Unknown action: {action}"},
        status=400,
    )


def create_response(body, status: int = 200, headers: dict = None):
    """Create a response object for Vercel."""
    response_headers = {
        "Content-Type": "application/json",
        "Access-Control-Allow-Origin": "*",
    }
    if headers:
        response_headers.update(headers)

    if isinstance(body, dict):
        body = json.dumps(body)

    # Return in format expected by Vercel Python runtime
    return {
        "statusCode": status,
        "headers": response_headers,
        "body": body,
    }
