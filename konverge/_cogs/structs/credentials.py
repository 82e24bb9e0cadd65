"""
Authentication-related structures.

Only the rudimentary authentication is handled directly: the information
passed to the HTTP protocol and TCP/SSL connection, i.e. everything usable
in a generic HTTP client, and nothing more than that:

* TCP server host & port.
* SSL verification/ignorance flag.
* SSL certificate authority.
* SSL client certificate and its private key.
* HTTP ``Authorization: Basic username:password``.
* HTTP ``Authorization: Bearer token`` (or other schemes: Bearer, Digest, etc).
* URL's default namespace for the cases when this is implied.

.. seealso::
    :mod:`konverge._core.intents.piggybacking`.
"""
import dataclasses
from typing import Optional, Union


class LoginError(Exception):
    """ Raised when the credentials cannot be found or used to access the API. """


@dataclasses.dataclass(frozen=True)
class ConnectionInfo:
    """
    A single endpoint with specific credentials and connection flags to use.
    """
    server: str  # e.g. "https://localhost:443"
    ca_path: Optional[str] = None
    ca_data: Optional[Union[str, bytes]] = None
    insecure: Optional[bool] = None
    username: Optional[str] = None
    password: Optional[str] = None
    scheme: Optional[str] = None  # RFC-7235/5.1: e.g. Bearer, Basic, Digest, etc.
    token: Optional[str] = None
    certificate_path: Optional[str] = None
    certificate_data: Optional[Union[str, bytes]] = None
    private_key_path: Optional[str] = None
    private_key_data: Optional[Union[str, bytes]] = None
    default_namespace: Optional[str] = None
