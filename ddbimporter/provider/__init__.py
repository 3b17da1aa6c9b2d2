"""D&D Beyond provider: HTTP client, session validation and content listing."""

from ddbimporter.provider.auth import SessionValidator
from ddbimporter.provider.client import AuthError, DnDBeyondClient, FetchError
from ddbimporter.provider.content import ContentLister

__all__ = ["AuthError", "ContentLister", "DnDBeyondClient", "FetchError", "SessionValidator"]
