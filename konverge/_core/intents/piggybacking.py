"""
Rudimentary login to the cluster: in-cluster or via kubeconfig files.

Konverge is not a client library, and avoids bringing too much logic
for proper authentication, especially all the complex auth-providers.
Only the raw data from the service account or from a kubeconfig are used.

The checks are usually executed either from a pod in the tested cluster
(with a service account that has access to everything), or from a developer's
or CI machine with a kubeconfig of the tested cluster.
"""
import os
from typing import Any, Dict, Optional

import yaml

from konverge._cogs.helpers import typedefs
from konverge._cogs.structs import credentials

# As per https://kubernetes.io/docs/tasks/run-application/access-api-from-pod/
SERVICE_ACCOUNT_DIR = '/var/run/secrets/kubernetes.io/serviceaccount'


def has_service_account() -> bool:
    return os.path.exists(os.path.join(SERVICE_ACCOUNT_DIR, 'token'))


def login_with_service_account(**_: Any) -> Optional[credentials.ConnectionInfo]:
    """
    A minimalistic login handler that can get raw data from a service account.

    Authentication capabilities can be limited to keep the code short & simple.
    No parsing or sophisticated multi-step token retrieval is performed.
    """
    token_path = os.path.join(SERVICE_ACCOUNT_DIR, 'token')
    ns_path = os.path.join(SERVICE_ACCOUNT_DIR, 'namespace')
    ca_path = os.path.join(SERVICE_ACCOUNT_DIR, 'ca.crt')

    if os.path.exists(token_path):
        with open(token_path, encoding='utf-8') as f:
            token = f.read().strip()

        namespace: Optional[str] = None
        if os.path.exists(ns_path):
            with open(ns_path, encoding='utf-8') as f:
                namespace = f.read().strip()

        return credentials.ConnectionInfo(
            server='https://kubernetes.default.svc',
            ca_path=ca_path if os.path.exists(ca_path) else None,
            token=token or None,
            default_namespace=namespace or None,
        )
    else:
        return None


def has_kubeconfig() -> bool:
    env_var_set = bool(os.environ.get('KUBECONFIG'))
    file_exists = os.path.exists(os.path.expanduser('~/.kube/config'))
    return env_var_set or file_exists


def login_with_kubeconfig(**_: Any) -> Optional[credentials.ConnectionInfo]:
    """
    A minimalistic login handler that can get raw data from a kubeconfig file.

    Several files can be specified in ``$KUBECONFIG``; the first value wins
    for every context, cluster, and user, as prescribed by Kubernetes.
    Only the current context is used.
    """
    kubeconfig = os.environ.get('KUBECONFIG')
    if not kubeconfig and os.path.exists(os.path.expanduser('~/.kube/config')):
        kubeconfig = '~/.kube/config'
    if not kubeconfig:
        return None

    paths = [path.strip() for path in kubeconfig.split(os.pathsep)]
    paths = [os.path.expanduser(path) for path in paths if path]

    # As prescribed: if the file is absent or non-deserialisable, then fail.
    current_context: Optional[str] = None
    contexts: Dict[Any, Any] = {}
    clusters: Dict[Any, Any] = {}
    users: Dict[Any, Any] = {}
    for path in paths:

        with open(path, encoding='utf-8') as f:
            config = yaml.safe_load(f.read()) or {}

        if current_context is None:
            current_context = config.get('current-context')
        for kind, store in [('contexts', contexts), ('clusters', clusters), ('users', users)]:
            for item in config.get(kind) or []:
                store.setdefault(item['name'], item.get(kind[:-1]) or {})

    if current_context is None:
        raise credentials.LoginError('Current context is not set in kubeconfigs.')
    try:
        context = contexts[current_context]
        cluster = clusters[context['cluster']]
        user = users.get(context.get('user'), {})
    except KeyError as e:
        raise credentials.LoginError(f'Kubeconfig references an unknown entry: {e}') from e

    # We do not make a fake API request to refresh the token of auth-providers.
    provider_token = user.get('auth-provider', {}).get('config', {}).get('access-token')

    return credentials.ConnectionInfo(
        server=cluster.get('server'),
        ca_path=cluster.get('certificate-authority'),
        ca_data=cluster.get('certificate-authority-data'),
        insecure=cluster.get('insecure-skip-tls-verify'),
        certificate_path=user.get('client-certificate'),
        certificate_data=user.get('client-certificate-data'),
        private_key_path=user.get('client-key'),
        private_key_data=user.get('client-key-data'),
        username=user.get('username'),
        password=user.get('password'),
        token=user.get('token') or provider_token,
        default_namespace=context.get('namespace'),
    )


def login(*, logger: typedefs.Logger) -> credentials.ConnectionInfo:
    """
    Find the credentials: the in-cluster service account first, kubeconfig next.
    """
    info = login_with_service_account()
    if info is not None:
        logger.debug("Logged in with the in-cluster service account.")
        return info

    info = login_with_kubeconfig()
    if info is not None:
        logger.debug("Logged in with the kubeconfig.")
        return info

    raise credentials.LoginError("Cannot authenticate neither in-cluster, nor via kubeconfig.")
