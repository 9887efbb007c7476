"""Relay endpoints that front the quote API."""

import json
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from src.utils.config import RelayConfig


class RelayPayloadError(ValueError):
    """Raised when a relay response cannot be unwrapped into a JSON document."""


@dataclass(frozen=True)
class RelayEndpoint:
    """
    One request front-end for the quote API.

    ``template`` contains a ``{url}`` placeholder for the target request. A
    template that is exactly ``{url}`` calls the provider directly. When
    ``wrapped`` is set the relay returns ``{"contents": "<json string>"}``.
    """

    name: str
    template: str
    wrapped: bool = False

    @property
    def is_direct(self) -> bool:
        return self.template == "{url}"

    def build_url(self, target_url: str) -> str:
        if self.is_direct:
            return target_url
        return self.template.replace("{url}", quote(target_url, safe=""))

    def unwrap(self, body: Any) -> Any:
        """
        Return the provider payload from a decoded response body.

        Raises:
            RelayPayloadError if the envelope is missing or not a JSON string
        """
        if not self.wrapped:
            return body
        if not isinstance(body, dict):
            raise RelayPayloadError(f"{self.name}: envelope is not an object")
        contents = body.get("contents")
        if not isinstance(contents, str):
            raise RelayPayloadError(f"{self.name}: envelope has no string 'contents'")
        try:
            return json.loads(contents)
        except json.JSONDecodeError as e:
            raise RelayPayloadError(f"{self.name}: contents is not valid JSON") from e

    @classmethod
    def from_config(cls, relay: RelayConfig) -> "RelayEndpoint":
        return cls(name=relay.name, template=relay.template, wrapped=relay.wrapped)
