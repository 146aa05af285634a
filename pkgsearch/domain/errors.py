"""
Error taxonomy for the package search service.

Each error carries the HTTP status it maps to and a short reason that is safe
to show to clients. Details (paths, driver messages) belong in the logs.
"""
from __future__ import annotations


class PackageSearchError(Exception):
    status_code: int = 500
    default_reason: str = "internal error"

    def __init__(self, reason: str | None = None):
        self.reason = reason or self.default_reason
        super().__init__(self.reason)


class ValidationError(PackageSearchError):
    """Missing or invalid client input."""

    status_code = 400
    default_reason = "invalid request"


class FetchError(PackageSearchError):
    """The remote snapshot could not be copied to local storage."""

    default_reason = "failed to fetch index snapshot"


class OpenError(PackageSearchError):
    """The local snapshot is absent, corrupt, or not a package index."""

    default_reason = "failed to open index snapshot"


class QueryError(PackageSearchError):
    """The storage layer failed while answering a search."""

    default_reason = "query error"
