"""Remote URL normalization and permalink construction."""

from .permalink import build_permalink, encode_component, normalize_remote

__all__ = [
    "build_permalink",
    "encode_component",
    "normalize_remote",
]
