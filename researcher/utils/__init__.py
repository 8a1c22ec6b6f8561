"""
Helpers shared by the search provider, the aggregator and both servers

- resolve_url: unwraps search engine click-redirect links
- derive_source_name: short source label derived from a result URL
- parse_int: lenient integer parsing for request and tool arguments
"""

from .params import parse_int
from .urls import resolve_url, derive_source_name

__all__ = [
    "parse_int",
    "resolve_url",
    "derive_source_name",
]
