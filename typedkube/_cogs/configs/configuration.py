"""
All configuration flags, options, settings to fine-tune the client.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it).

The settings are never global: a settings object is created by the caller
(or by default, per client) and passed explicitly to every routine
which needs it. Tests can therefore use a fresh object every time.
"""
import dataclasses
from typing import Iterable, Optional, Union


@dataclasses.dataclass
class NetworkingSettings:

    request_timeout: Optional[float] = 5 * 60  # == aiohttp.client.DEFAULT_TIMEOUT
    """
    A timeout for the whole request: from connecting to reading the response.
    It is used when no explicit per-call timeout is given.
    """

    connect_timeout: Optional[float] = None
    """
    A timeout for establishing the TCP connection (``sock_connect``).
    """

    error_backoffs: Union[float, Iterable[float]] = ()
    """
    Backoffs (in seconds) between the transport-level retries of a request.

    Only the network-level errors and the server-side errors (HTTP 5xx) are
    retried. The client operations never retry on their own: by default,
    this sequence is empty and every error is escalated immediately.

    It can be a single number or an iterable of numbers; the number of
    retries is the length of the iterable (if it has the length).
    """


@dataclasses.dataclass
class ClientSettings:
    networking: NetworkingSettings = dataclasses.field(default_factory=NetworkingSettings)
