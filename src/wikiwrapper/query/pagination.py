"""
Paged Query Driver

Two paging strategies share one `fetch` interface:

- `ExhaustivePaging` follows the upstream `query-continue-offset` until the
  wiki reports no further offset and returns every result in one list.
  Used where the full result set is small and bounded.
- `SinglePagePaging` performs exactly one fetch and hands the upstream offset
  back to the caller as an opaque continuation token.

The strategy for each resource kind is chosen by the query builder.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List, NamedTuple, Optional

from ..core.errors import MalformedUpstreamError

if TYPE_CHECKING:
    from ..wiki.smw_client import SMWClient
    from .builder import SemanticQuery

logger = logging.getLogger("wikiwrapper.query")

CONTINUE_OFFSET_KEY = "query-continue-offset"


class QueryPage(NamedTuple):
    """Raw result items of one or more fetched pages."""
    results: List[Dict[str, Any]]
    continue_key: Optional[str] = None


# ---------------------------------------------------------------------
# Response Helpers
# ---------------------------------------------------------------------

def page_results(resp: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Return the `query.results` items of an askargs response.

    With `api_version=3` results are a list of single-key objects; the older
    object-keyed form is normalized to the same shape.
    """
    query = resp.get("query")
    if not isinstance(query, dict):
        raise MalformedUpstreamError("askargs response has no 'query' object")

    results = query.get("results")
    if isinstance(results, list):
        return results
    if isinstance(results, dict):
        return [{key: value} for key, value in results.items()]
    raise MalformedUpstreamError("askargs response has no 'query.results' list")


def continue_offset(resp: Dict[str, Any]) -> Optional[str]:
    """
    Return the continuation offset of an askargs response, or None when the
    result set is exhausted.
    """
    offset = resp.get(CONTINUE_OFFSET_KEY)
    if offset is None:
        return None
    if isinstance(offset, bool) or not isinstance(offset, (int, str)):
        raise MalformedUpstreamError(f"invalid {CONTINUE_OFFSET_KEY}: {offset!r}")
    offset = str(offset)
    if not offset.isdigit():
        raise MalformedUpstreamError(f"invalid {CONTINUE_OFFSET_KEY}: {offset!r}")
    return offset


# ---------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------

class PagingStrategy:
    """Interface shared by the paging strategies."""

    async def fetch(self, smw: SMWClient, query: SemanticQuery) -> QueryPage:
        raise NotImplementedError


class ExhaustivePaging(PagingStrategy):
    """
    Driver-managed pagination: fetch every page before returning.

    The first failing page aborts the whole fetch; partial results are never
    returned.
    """

    def __repr__(self) -> str:
        return "ExhaustivePaging()"

    async def fetch(self, smw: SMWClient, query: SemanticQuery) -> QueryPage:
        results: List[Dict[str, Any]] = []
        offset: Optional[str] = None
        pages = 0

        while True:
            resp = await smw.ask(**query.request_args(offset))
            results.extend(page_results(resp))
            pages += 1

            next_offset = continue_offset(resp)
            if next_offset is None:
                break
            if offset is not None and int(next_offset) <= int(offset):
                raise MalformedUpstreamError(
                    f"{CONTINUE_OFFSET_KEY} did not advance past {offset}"
                )
            offset = next_offset

        logger.debug("Fetched %d results in %d pages", len(results), pages)
        return QueryPage(results=results)


class SinglePagePaging(PagingStrategy):
    """
    Caller-managed pagination: fetch one page, starting at the caller's
    continuation token, and expose the next token.
    """

    def __init__(self, continue_key: Optional[str] = None) -> None:
        self.continue_key = continue_key or None

    def __repr__(self) -> str:
        return f"SinglePagePaging(continue_key={self.continue_key!r})"

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, SinglePagePaging)
            and other.continue_key == self.continue_key
        )

    async def fetch(self, smw: SMWClient, query: SemanticQuery) -> QueryPage:
        resp = await smw.ask(**query.request_args(self.continue_key))
        return QueryPage(
            results=page_results(resp),
            continue_key=continue_offset(resp),
        )
