"""Movie metadata lookup, used to label candidates for display."""

from .base import CandidateMetadata, MovieDetails, MovieSearchResult

__all__ = ["CandidateMetadata", "MovieDetails", "MovieSearchResult"]
