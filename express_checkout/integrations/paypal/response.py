"""
PayPal NVP response envelope.

Every NVP call answers with a URL-encoded body; ``ACK`` tells whether the
call went through. The rest of the body is a flat field map whose keys
depend on the API method.
"""

import json
from dataclasses import dataclass, field
from typing import Dict, Optional
from urllib.parse import parse_qs

SUCCESS_ACKS = ("Success", "SuccessWithWarning")


@dataclass
class Response:
    """Result of a single NVP API call."""
    body: Dict[str, str] = field(default_factory=dict)
    method: Optional[str] = None

    @classmethod
    def from_nvp(cls, content: str, method: Optional[str] = None) -> "Response":
        parsed = parse_qs(content, keep_blank_values=True)
        return cls(body={key: values[0] for key, values in parsed.items()}, method=method)

    @classmethod
    def from_transport_error(cls, error: Exception, method: Optional[str] = None) -> "Response":
        return cls(
            body={
                "ACK": "Failure",
                "L_ERRORCODE0": "HTTPError",
                "L_SHORTMESSAGE0": type(error).__name__,
                "L_LONGMESSAGE0": str(error),
            },
            method=method,
        )

    @property
    def ack(self) -> Optional[str]:
        return self.body.get("ACK")

    @property
    def is_success(self) -> bool:
        return self.ack in SUCCESS_ACKS

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.body.get(key, default)

    def get_error_message(self) -> Optional[str]:
        return self.body.get("L_LONGMESSAGE0") or self.body.get("L_SHORTMESSAGE0")

    def __str__(self) -> str:
        return json.dumps({"method": self.method, "body": self.body}, sort_keys=True)
