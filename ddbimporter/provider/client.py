"""HTTP client for the D&D Beyond REST endpoints.

Every request is a GET carrying the CobaltSession cookie and a browser-like
User-Agent. Anything but HTTP 200 is a failure; there are no retries.
"""

import logging
from typing import Any

import httpx

from ddbimporter.config import DEFAULT_BASE_URL, DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)

USER_CHARACTERS_PATH = "/api/user/characters"
DIGITAL_CONTENT_PATH = "/api/subscriptions/user/digital-content"
CHARACTER_JSON_PATH = "/api/character/{character_id}/json"


class DnDBeyondClient:
    """Thin async wrapper around httpx for cookie-authenticated GETs."""

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._credential: str | None = None
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"User-Agent": user_agent, "Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    @property
    def credential(self) -> str | None:
        return self._credential

    def set_credential(self, credential: str | None) -> None:
        """Remember the credential used when a call does not pass one."""
        self._credential = credential or None

    async def get(self, path: str, credential: str | None = None) -> httpx.Response:
        """Issue one authenticated GET and return the raw response.

        Raises AuthError if no credential is available, FetchError on
        transport failure or a cookie that cannot be sent as a header.
        Status codes are not checked here.
        """
        cookie = credential or self._credential
        if not cookie:
            raise AuthError("No Cobalt cookie available for authentication")
        if not cookie.isascii():
            # httpx encodes header values as ASCII and would raise UnicodeEncodeError
            raise FetchError("Cobalt cookie contains characters not allowed in an HTTP header")

        logger.debug("GET %s", path)
        try:
            return await self._client.get(path, headers={"Cookie": f"CobaltSession={cookie}"})
        except httpx.HTTPError as e:
            raise FetchError(f"Request to {path} failed: {e}") from e

    async def get_json(self, path: str, credential: str | None = None) -> Any:
        """GET and decode JSON. Raises FetchError unless the status is 200."""
        response = await self.get(path, credential)
        if response.status_code != 200:
            raise FetchError(
                f"Request to {path} failed with status {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise FetchError(f"Invalid JSON from {path}: {e}", status_code=200) from e

    async def get_digital_content(self, credential: str | None = None) -> Any:
        return await self.get_json(DIGITAL_CONTENT_PATH, credential)

    async def get_user_characters(self, credential: str | None = None) -> Any:
        return await self.get_json(USER_CHARACTERS_PATH, credential)

    async def get_character(self, character_id: str, credential: str | None = None) -> Any:
        return await self.get_json(
            CHARACTER_JSON_PATH.format(character_id=character_id), credential
        )

    async def close(self) -> None:
        await self._client.aclose()


class AuthError(Exception):
    """Missing, rejected or unvalidated credential."""


class FetchError(Exception):
    """Network failure or a non-200 response from the provider."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
