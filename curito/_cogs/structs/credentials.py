"""
What is needed to reach the cluster's API: where it is and how to present oneself.

Only the credentials that a plain HTTPS client can use are supported:
a bearer token (as left by ``oc login``), client certificates by path,
and the CA to verify the server against. Whatever else is configured
(auth-providers, exec-plugins) is resolved by the client library if it is
installed, and reaches us as a token too.

.. seealso::
    :mod:`curito._core.intents.piggybacking`.
"""
import dataclasses
from typing import Optional


class LoginError(Exception):
    """ Raised when the tooling cannot login to the API. """


@dataclasses.dataclass(frozen=True)
class ConnectionInfo:
    server: str  # e.g. "https://api.cluster.example.com:6443"
    ca_path: Optional[str] = None
    ca_data: Optional[str] = None  # base64-encoded PEM, as in kubeconfigs.
    insecure: Optional[bool] = None
    token: Optional[str] = None
    certificate_path: Optional[str] = None
    private_key_path: Optional[str] = None
    default_namespace: Optional[str] = None
