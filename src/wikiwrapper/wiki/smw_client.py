"""
Semantic MediaWiki (SMW) API Client

This module provides the one capability the query engine needs from its
environment: execute a semantic query (`action=askargs`) against the wiki
and return the parsed response.

Design Goals
------------
- No dependence on private MediaWikiClient internals
- Clean error semantics: every failure is an `UpstreamQueryError`
- Fully dependency-injectable for testing
"""

from __future__ import annotations

from typing import Dict, Any, Optional
import logging

from .api_client import MediaWikiClient, MediaWikiRequestError, MediaWikiResponseError
from ..core.errors import UpstreamQueryError

logger = logging.getLogger("wikiwrapper.smw")


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class SMWQueryError(UpstreamQueryError):
    """Raised when an SMW askargs query fails."""


# ---------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------

class SMWClient:
    """
    Semantic MediaWiki API client for executing askargs queries.
    """

    def __init__(self, mw_client: MediaWikiClient) -> None:
        """
        Parameters
        ----------
        mw_client : MediaWikiClient
            An initialized MediaWiki API client.
        """
        self._mw = mw_client

    @property
    def mw(self) -> MediaWikiClient:
        return self._mw

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ask(
        self,
        conditions: str,
        printouts: str = "",
        parameters: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Execute a Semantic MediaWiki askargs query.

        Parameters
        ----------
        conditions : str
            Pipe-separated query conditions.

        printouts : str
            Pipe-separated property names to return.

        parameters : Optional[str]
            Pipe-separated query parameters (limit, offset, sort, order).

        Returns
        -------
        Dict[str, Any]
            Raw JSON response from SMW.

        Raises
        ------
        ValueError
            If the condition string is empty.

        SMWQueryError
            If the query fails at the transport or response level.
        """
        if not conditions:
            raise ValueError("SMW conditions must be non-empty.")

        request_params = {
            "action": "askargs",
            "conditions": conditions,
            "printouts": printouts,
            "api_version": 3,
        }

        if parameters:
            request_params["parameters"] = parameters

        try:
            return await self._mw.get(request_params)
        except (MediaWikiRequestError, MediaWikiResponseError) as exc:
            logger.error(
                "SMW askargs query failed: %s (%s)",
                conditions,
                type(exc).__name__,
            )
            raise SMWQueryError(f"SMW query failed: {exc}") from exc
