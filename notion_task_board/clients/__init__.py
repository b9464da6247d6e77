"""HTTP-клиенты внешних API."""

from .notion import NotionAPIError, NotionClient

__all__ = ["NotionClient", "NotionAPIError"]
