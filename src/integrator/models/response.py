"""Transport-level response descriptor."""

from pydantic import Field

from integrator.models.base import IntegratorBaseModel


class ResponseMetadata(IntegratorBaseModel):
    """What the transport learned about the response, besides its body.

    Purely informational: the integrator never classifies status codes.
    """

    status_code: int | None = None
    headers: dict[str, str] = Field(default_factory=dict)
    url: str | None = None
    http_version: str | None = None

    @property
    def is_success(self) -> bool:
        """True when the status code is 2xx."""
        return self.status_code is not None and 200 <= self.status_code < 300
