"""Content search providers."""

from .multi_source_research import MultiSourceResearcher
from .searxng_client import SearxNGVideoSearch, build_search_query

__all__ = ["MultiSourceResearcher", "SearxNGVideoSearch", "build_search_query"]
