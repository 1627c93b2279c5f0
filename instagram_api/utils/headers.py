"""
Default HTTP headers for Instagram API requests.
"""

from typing import Optional

USER_AGENT = "instagram-api-client/python-httpx"


class HeaderGenerator:
    """
    Generates the headers sent with every API request.
    The API only speaks JSON, so Accept is fixed.
    """

    def __init__(self, user_agent: Optional[str] = None):
        self.user_agent = user_agent or USER_AGENT

    def get_api_headers(self, extra: Optional[dict[str, str]] = None) -> dict[str, str]:
        """Get headers for a resource or OAuth request."""
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
        }
        if extra:
            headers.update(extra)
        return headers
