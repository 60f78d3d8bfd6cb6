"""Maltiverse batch-search link for manual review of a pass's addresses."""

from __future__ import annotations

from typing import Iterable
from urllib.parse import quote

MALTIVERSE_SEARCH = "https://maltiverse.com/intelligence/search;query={query};page=1;sort=creation_time_desc"


def build_reference(addresses: Iterable[str]) -> str:
    """URL-encode the space-joined addresses into the Maltiverse search template."""
    query = quote(" ".join(addresses), safe="!~*'()")
    return MALTIVERSE_SEARCH.format(query=query)
