"""
Connection information for the API server: where it is, and how to talk to it.

The client does not log in on its own: there is no kubeconfig parsing,
no in-cluster service accounts, no token refreshing. The connection info is
assembled by the callers (or by the CLI from its options) and is used as is.
"""
import dataclasses
from typing import Optional


class ConnectionInfoError(Exception):
    """ Raised when the connection info is inconsistent and cannot be used. """


@dataclasses.dataclass(frozen=True)
class ConnectionInfo:
    """
    A single endpoint with specific credentials and connection flags to use.
    """
    server: str  # e.g. "https://localhost:443"
    ca_path: Optional[str] = None
    ca_data: Optional[bytes] = None
    insecure: Optional[bool] = None
    username: Optional[str] = None
    password: Optional[str] = None
    scheme: Optional[str] = None  # RFC-7235/5.1: e.g. Bearer, Basic, Digest, etc.
    token: Optional[str] = None
    certificate_path: Optional[str] = None
    certificate_data: Optional[bytes] = None
    private_key_path: Optional[str] = None
    private_key_data: Optional[bytes] = None
    default_namespace: Optional[str] = None  # used by the CLI when no namespace is given.
