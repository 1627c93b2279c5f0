"""
Data models for the Instagram API client using Pydantic for validation.
"""

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

ParamValue = Union[str, int, float]
HttpMethod = Literal["GET", "POST", "DELETE"]


class RequestSpec(BaseModel):
    """A fully built API request, ready for dispatch."""
    path: str
    authenticated: bool = False
    method: HttpMethod = "GET"
    params: dict[str, ParamValue] = Field(default_factory=dict)
    url: str = Field(..., description="Absolute URL including credential and GET parameters")
    body: Optional[str] = Field(default=None, description="Form-encoded POST body")

    @property
    def headers(self) -> dict[str, str]:
        if self.body is not None:
            return {"Content-Type": "application/x-www-form-urlencoded"}
        return {}


class Pagination(BaseModel):
    """The ``pagination`` object of a response envelope."""
    model_config = ConfigDict(extra="allow")

    next_url: Optional[str] = None
    next_max_id: Optional[Union[str, int]] = None
    next_cursor: Optional[Union[str, int]] = None


class OAuthToken(BaseModel):
    """Decoded response of the OAuth code exchange."""
    model_config = ConfigDict(extra="allow")

    access_token: str
    user: dict[str, Any] = Field(default_factory=dict)


class BatchResult(BaseModel):
    """Outcome of one per-token request in a batch call."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    token: str
    envelope: Optional[Any] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None
