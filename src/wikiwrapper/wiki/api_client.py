"""
MediaWiki API Client

Thin async transport over the MediaWiki `api.php` endpoint. Every request
is a GET returning a parsed JSON document; transport failures and API-level
`error` payloads are raised as `UpstreamQueryError` subclasses.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ..config import settings
from ..core.errors import MalformedUpstreamError, UpstreamQueryError

logger = logging.getLogger("wikiwrapper.mw")


class MediaWikiRequestError(UpstreamQueryError):
    """Raised when the wiki could not be reached or answered with an HTTP error."""


class MediaWikiResponseError(UpstreamQueryError):
    """Raised when the wiki answered with an API error payload."""


class MediaWikiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url or str(settings.wiki_api_url)
        self.user_agent = user_agent or settings.wiki_user_agent
        self.timeout = timeout if timeout is not None else settings.wiki_http_timeout
        self._transport = transport

    async def get(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Issue one GET request against the MediaWiki API.

        Args:
            params: MediaWiki API parameters; `format=json` and
                `formatversion=2` are added.

        Raises:
            MediaWikiRequestError: transport or HTTP status failure.
            MediaWikiResponseError: the API reported an error.
            MalformedUpstreamError: the body is not a JSON object.
        """
        request_params = {"format": "json", "formatversion": 2}
        request_params.update(params)
        headers = {"User-Agent": self.user_agent}

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                resp = await client.get(self.base_url, params=request_params, headers=headers)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("MediaWiki request failed: %s", exc)
            raise MediaWikiRequestError(f"wiki request failed: {exc}") from exc

        try:
            data = resp.json()
        except ValueError as exc:
            raise MalformedUpstreamError("wiki response is not valid JSON") from exc

        if not isinstance(data, dict):
            raise MalformedUpstreamError("wiki response is not a JSON object")

        if "error" in data:
            error = data["error"]
            info = error.get("info") if isinstance(error, dict) else error
            raise MediaWikiResponseError(f"wiki API error: {info}")

        return data

    async def get_category_members(
        self,
        category: str,
        namespace: int,
        limit: int = 50,
        continue_key: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Fetch one page of a category listing restricted to a namespace."""
        params: Dict[str, Any] = {
            "action": "query",
            "list": "categorymembers",
            "cmtitle": category,
            "cmprop": "title",
            "cmnamespace": namespace,
            "cmlimit": limit,
        }
        if continue_key:
            params["continue"] = "-||"
            params["cmcontinue"] = continue_key
        return await self.get(params)

    async def get_page_image_info(
        self,
        title: str,
        thumb_width: int = 320,
        thumb_height: int = 240,
    ) -> Dict[str, Any]:
        """Fetch size and URL info, with thumbnails, for every image on a page."""
        params = {
            "action": "query",
            "prop": "imageinfo",
            "titles": title,
            "generator": "images",
            "iiprop": "size|url",
            "iiurlwidth": thumb_width,
            "iiurlheight": thumb_height,
            "gimlimit": "max",
        }
        return await self.get(params)
