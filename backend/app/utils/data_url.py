"""Helpers for ``data:<mime>;base64,<payload>`` image strings."""
import base64
import binascii
import re

from app.core.errors import BadRequest

DEFAULT_MIME_TYPE = "image/png"

# Mime parameters such as ";charset=binary" are accepted and dropped.
_DATA_URL_RE = re.compile(
    r"^data:(?P<mime>[^;,]+)(?:;[^;,]+)*?;base64,(?P<payload>.+)$",
    re.DOTALL,
)


def is_data_url(value: str) -> bool:
    return value.startswith("data:")


def parse_data_url(value: str) -> tuple[str, bytes]:
    """Split a base64 data URL into its mime type and decoded bytes.

    Raises:
        BadRequest: When the string is not a base64 data URL.
    """
    match = _DATA_URL_RE.match(value)
    if match is None:
        raise BadRequest("Invalid base64 string")
    try:
        data = base64.b64decode(re.sub(r"\s+", "", match.group("payload")), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise BadRequest("Invalid base64 string") from exc
    return match.group("mime"), data


def to_data_url(data: bytes, mime_type: str = DEFAULT_MIME_TYPE) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def wrap_base64(payload: str, mime_type: str = DEFAULT_MIME_TYPE) -> str:
    """Return ``payload`` as a data URL, leaving existing data URLs untouched."""
    if is_data_url(payload):
        return payload
    return f"data:{mime_type};base64,{payload}"
