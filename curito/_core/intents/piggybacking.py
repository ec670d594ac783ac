"""
Finding the credentials of the current user, wherever they are.

The sources are tried in this order, and the first one that works wins:

* The official client library, if installed (``pip install curito[full-auth]``).
  It knows the auth-providers and exec-plugins, which we do not.
* The pod's service account, when running inside the cluster (e.g. in CI jobs).
* The kubeconfig files, as left by ``oc login`` on the developers' machines.

.. seealso::
    :mod:`curito._cogs.structs.credentials`.
"""
import os
from typing import Any, Dict, List, Mapping, Optional

import yaml

from curito._cogs.helpers import typedefs
from curito._cogs.structs import credentials

# As per https://kubernetes.io/docs/tasks/run-application/access-api-from-pod/
SERVICE_ACCOUNT_DIR = '/var/run/secrets/kubernetes.io/serviceaccount'
IN_CLUSTER_SERVER = 'https://kubernetes.default.svc'

DEFAULT_KUBECONFIG = '~/.kube/config'


def login(*, logger: typedefs.Logger) -> credentials.ConnectionInfo:
    for login_fn in [login_via_client, login_with_service_account, login_with_kubeconfig]:
        info = login_fn(logger=logger)
        if info is not None:
            logger.debug(f"Logged in with {login_fn.__name__}() to {info.server}.")
            return info
    raise credentials.LoginError("No credentials are found: neither the client library, "
                                 "nor a service account, nor a kubeconfig is available.")


def login_via_client(*, logger: typedefs.Logger) -> Optional[credentials.ConnectionInfo]:

    # Imported here: the library is optional, and its absence is simulated in tests.
    try:
        import kubernetes.client
        import kubernetes.config
    except ImportError:
        return None

    try:
        kubernetes.config.load_incluster_config()
    except kubernetes.config.ConfigException:
        try:
            kubernetes.config.load_kube_config()
        except kubernetes.config.ConfigException as e:
            logger.debug(f"The client library has no configuration: {e}")
            return None

    # The auth-providers patch this method to return their fresh tokens.
    config = kubernetes.client.Configuration.get_default_copy()
    header: str = config.get_api_key_with_prefix('authorization') or ''
    token = header.rsplit(' ', 1)[-1]
    return credentials.ConnectionInfo(
        server=config.host,
        ca_path=config.ssl_ca_cert,
        insecure=not config.verify_ssl,
        token=token or None,
        certificate_path=config.cert_file,
        private_key_path=config.key_file,
    )


def login_with_service_account(*, logger: typedefs.Logger) -> Optional[credentials.ConnectionInfo]:
    token = _read_text(os.path.join(SERVICE_ACCOUNT_DIR, 'token'))
    if token is None:
        return None

    ca_path = os.path.join(SERVICE_ACCOUNT_DIR, 'ca.crt')
    namespace = _read_text(os.path.join(SERVICE_ACCOUNT_DIR, 'namespace'))
    return credentials.ConnectionInfo(
        server=IN_CLUSTER_SERVER,
        ca_path=ca_path if os.path.exists(ca_path) else None,
        token=token or None,
        default_namespace=namespace or None,
    )


def login_with_kubeconfig(*, logger: typedefs.Logger) -> Optional[credentials.ConnectionInfo]:
    """
    Take the server, the token and the namespace of the current context.

    Only what ``oc login`` and the usual cluster installers put there is used.
    The exec-plugins are not executed, and the auth-providers' tokens are
    taken as they are, without refreshing.
    """
    paths = kubeconfig_paths()
    if not paths:
        return None

    config = load_kubeconfig(paths)
    current_context: Optional[str] = config.get('current-context')
    contexts = _by_name(config, 'contexts', 'context')
    if not current_context:
        raise credentials.LoginError("Current context is not set in kubeconfigs.")
    if current_context not in contexts:
        raise credentials.LoginError(f"Current context {current_context!r} is not defined.")
    context = contexts[current_context]
    cluster = _by_name(config, 'clusters', 'cluster').get(context.get('cluster'), {})
    user = _by_name(config, 'users', 'user').get(context.get('user'), {})

    if not cluster.get('server'):
        raise credentials.LoginError(f"No server is defined for context {current_context!r}.")
    if user.get('client-certificate-data') or user.get('client-key-data'):
        logger.warning("Inline client certificates in kubeconfigs are not supported; "
                       "install the client library to use them: curito[full-auth].")

    provider_config = (user.get('auth-provider') or {}).get('config') or {}
    return credentials.ConnectionInfo(
        server=cluster['server'],
        ca_path=cluster.get('certificate-authority'),
        ca_data=cluster.get('certificate-authority-data'),
        insecure=cluster.get('insecure-skip-tls-verify'),
        token=user.get('token') or provider_config.get('access-token'),
        certificate_path=user.get('client-certificate'),
        private_key_path=user.get('client-key'),
        default_namespace=context.get('namespace'),
    )


def kubeconfig_paths() -> List[str]:
    """
    The files listed in ``$KUBECONFIG``, or the default one if it exists.

    As per https://kubernetes.io/docs/concepts/configuration/organize-cluster-access-kubeconfig/
    """
    listed = os.environ.get('KUBECONFIG', '').split(os.pathsep)
    paths = [os.path.expanduser(path.strip()) for path in listed if path.strip()]
    if not paths and os.path.exists(os.path.expanduser(DEFAULT_KUBECONFIG)):
        paths = [os.path.expanduser(DEFAULT_KUBECONFIG)]
    return paths


def load_kubeconfig(paths: List[str]) -> Dict[str, Any]:
    """ Merge several kubeconfigs into one: the first file to define anything wins. """
    merged: Dict[str, Any] = {'current-context': None, 'contexts': [], 'clusters': [], 'users': []}
    for path in paths:
        try:
            with open(path, encoding='utf-8') as f:
                config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise credentials.LoginError(f"Cannot read the kubeconfig {path!r}: {e}") from e
        if not isinstance(config, dict):
            raise credentials.LoginError(f"The kubeconfig {path!r} is not a mapping.")

        merged['current-context'] = merged['current-context'] or config.get('current-context')
        for section in ['contexts', 'clusters', 'users']:
            merged[section].extend(config.get(section) or [])
    return merged


def _by_name(config: Mapping[str, Any], section: str, field: str) -> Dict[str, Dict[str, Any]]:
    items: Dict[str, Dict[str, Any]] = {}
    for item in config.get(section) or []:
        items.setdefault(item['name'], item.get(field) or {})
    return items


def _read_text(path: str) -> Optional[str]:
    try:
        with open(path, encoding='utf-8') as f:
            return f.read().strip()
    except FileNotFoundError:
        return None
