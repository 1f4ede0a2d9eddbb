"""Exceptions raised by the vendor discovery pipeline."""

from __future__ import annotations


class DiscoveryError(Exception):
    """Base class for every error raised by this package."""


class InvalidQueryError(DiscoveryError, ValueError):
    """The inbound query is empty or not a string. Rejected before any external call."""


class PlaceSearchError(DiscoveryError):
    """The place search provider failed or returned something unusable."""


class EnhancementError(DiscoveryError):
    """The language model response could not be decoded into enhancements."""
