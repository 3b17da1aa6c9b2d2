"""Session validation against D&D Beyond using the Cobalt cookie."""

import logging

from ddbimporter.models import Session
from ddbimporter.notifications import NotificationCenter
from ddbimporter.provider.client import (
    USER_CHARACTERS_PATH,
    AuthError,
    DnDBeyondClient,
    FetchError,
)
from ddbimporter.settings.store import SettingsStore

logger = logging.getLogger(__name__)


class SessionValidator:
    """Holds the current session and validates credentials with one probe.

    A failed probe is a definitive "not authenticated" for that call; the
    caller may validate again, nothing is retried here.
    """

    def __init__(self, client: DnDBeyondClient, notifier: NotificationCenter) -> None:
        self._client = client
        self._notifier = notifier
        self._session = Session()

    @property
    def session(self) -> Session:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session.authenticated

    async def initialize(self, settings: SettingsStore) -> Session:
        """Validate the stored cookie, if any. Never raises on a bad cookie."""
        cookie = await settings.get("cobaltCookie")
        if cookie:
            try:
                await self.validate(cookie)
            except AuthError:
                logger.info("Stored Cobalt cookie did not validate at start-up")
        return self._session

    async def validate(self, credential: str | None) -> Session:
        """Check `credential` against the provider.

        Returns the authenticated session; raises AuthError otherwise, after
        clearing the session and notifying the user.
        """
        if not credential or not credential.strip():
            self.clear()
            raise AuthError("No Cobalt cookie provided")

        try:
            response = await self._client.get(USER_CHARACTERS_PATH, credential)
        except FetchError as e:
            logger.error("Authentication error: %s", e)
            self.clear()
            self._notifier.error("D&D Beyond authentication error. See logs for details.")
            raise AuthError(f"Authentication request failed: {e}") from e

        if response.status_code != 200:
            self.clear()
            self._notifier.error(
                "D&D Beyond authentication failed. Please check your Cobalt cookie."
            )
            raise AuthError(f"Authentication failed with status {response.status_code}")

        try:
            profile = response.json()
        except ValueError as e:
            self.clear()
            self._notifier.error("D&D Beyond authentication error. See logs for details.")
            raise AuthError(f"Invalid JSON in authentication response: {e}") from e

        self._session = Session(
            credential=credential,
            authenticated=True,
            profile=profile if isinstance(profile, dict) else {"data": profile},
        )
        self._client.set_credential(credential)
        self._notifier.info("D&D Beyond authentication successful!")
        logger.info("Authenticated with D&D Beyond")
        return self._session

    def clear(self) -> None:
        self._session = Session()
        self._client.set_credential(None)
