"""Client request metadata passed into auth operations."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ClientInfo:
    """Who is calling, as far as the transport can tell.

    Attributes:
        ip_address: Resolved client IP address.
        user_agent: Raw user agent header.
        device_info: Short device description stored on sessions.
    """

    ip_address: str | None = None
    user_agent: str | None = None
    device_info: str | None = None
