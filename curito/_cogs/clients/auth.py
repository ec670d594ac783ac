import base64
import ssl
from typing import Any, Dict, Optional

import aiohttp

from curito._cogs.helpers import versions
from curito._cogs.structs import credentials


class APIContext:
    """
    The aiohttp session for one run of waiting, and where it points to.

    All the polling tasks of the run share the same session. The context
    must be closed when the run is over, preferably by using it as
    an async context manager.
    """
    session: aiohttp.ClientSession
    server: str
    default_namespace: Optional[str]

    def __init__(self, info: credentials.ConnectionInfo) -> None:
        super().__init__()
        self.server = info.server
        self.default_namespace = info.default_namespace
        self.session = aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(limit=0, ssl=make_ssl_context(info)),
            headers=make_headers(info),
        )

    async def __aenter__(self) -> "APIContext":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self.session.close()


def make_ssl_context(info: credentials.ConnectionInfo) -> ssl.SSLContext:
    if info.ca_path and info.ca_data:
        raise credentials.LoginError("Both CA path & data are set. Need only one.")
    cadata: Optional[str] = None
    if info.ca_data:
        try:
            cadata = base64.b64decode(info.ca_data).decode('ascii')
        except ValueError as e:
            raise credentials.LoginError(f"The CA data is not a base64-encoded PEM: {e}") from e

    context = ssl.create_default_context(cafile=info.ca_path, cadata=cadata)
    if info.certificate_path and info.private_key_path:
        context.load_cert_chain(certfile=info.certificate_path, keyfile=info.private_key_path)
    if info.insecure:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def make_headers(info: credentials.ConnectionInfo) -> Dict[str, str]:
    headers = {'User-Agent': f'curito/{versions.version or "unknown"}'}
    if info.token:
        headers['Authorization'] = f'Bearer {info.token}'
    return headers
