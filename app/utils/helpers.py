"""Helper utilities (duration parsing, request helpers)."""
import re
from fastapi import Request

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd])\s*$")
_UNIT_SECONDS = {"s": 1, "m": 60, "h": 60 * 60, "d": 24 * 60 * 60}


def parse_duration(value: str) -> int:
    """Convert strings such as ``"15m"`` or ``"7d"`` to seconds.

    Bare integers are taken as seconds. Anything else raises ``ValueError``.
    """
    if isinstance(value, int):
        return value
    text = str(value or "").strip()
    if text.isdigit():
        return int(text)
    match = _DURATION_RE.match(text)
    if not match:
        raise ValueError(f"Invalid duration: {value!r} (expected <n>[smhd])")
    amount, unit = match.groups()
    return int(amount) * _UNIT_SECONDS[unit]


def get_client_ip(request: Request, trust_forwarded: bool = False) -> str:
    """Return client's IP address from request headers or connection info.

    `X-Forwarded-For` (comma-separated) is only honoured when
    ``trust_forwarded`` is set (the app runs behind a proxy that
    overwrites the header).
    Falls back to `request.client.host`, then 'unknown'.
    """
    x_forwarded_for = request.headers.get("x-forwarded-for") if trust_forwarded else None
    if x_forwarded_for:
        # X-Forwarded-For can contain a list of IPs
        return x_forwarded_for.split(",")[0].strip()

    client = getattr(request, "client", None)
    if client and getattr(client, "host", None):
        return client.host

    return "unknown"
