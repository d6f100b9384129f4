"""In-memory caching of line attributions."""

from .lru import NO_RECORD, AttributionCache, CachedAttribution, LRUCache, Marker

__all__ = [
    "NO_RECORD",
    "AttributionCache",
    "CachedAttribution",
    "LRUCache",
    "Marker",
]
