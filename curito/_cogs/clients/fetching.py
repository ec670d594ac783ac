import functools
from typing import Any, Awaitable, Callable, Collection, List, Mapping

from curito._cogs.clients import api, auth
from curito._cogs.configs import configuration
from curito._cogs.helpers import typedefs

RawPod = Mapping[str, Any]


def get_pods_url(namespace: str) -> str:
    return f'/api/v1/namespaces/{namespace}/pods'


def is_pod_ready(pod: RawPod) -> bool:
    """
    Check if the pod reports its readiness and is not going away.

    The terminating pods can still be ready for some time (the grace period),
    but they are not the pods of the fresh deployment, so they are excluded.
    """
    metadata = pod.get('metadata') or {}
    if metadata.get('deletionTimestamp'):
        return False
    conditions = (pod.get('status') or {}).get('conditions') or []
    return any(condition.get('type') == 'Ready' and condition.get('status') == 'True'
               for condition in conditions)


async def list_pods(
        label_key: str,
        label_value: str,
        *,
        namespace: str,
        context: auth.APIContext,
        settings: configuration.WaiterSettings,
        logger: typedefs.Logger,
) -> Collection[RawPod]:
    rsp = await api.get(
        url=get_pods_url(namespace),
        params={'labelSelector': f'{label_key}={label_value}'},
        context=context,
        settings=settings,
        logger=logger,
    )
    items: List[RawPod] = list(rsp.get('items') or [])
    return items


async def count_ready_pods(
        label_key: str,
        label_value: str,
        *,
        namespace: str,
        context: auth.APIContext,
        settings: configuration.WaiterSettings,
        logger: typedefs.Logger,
) -> int:
    pods = await list_pods(
        label_key, label_value,
        namespace=namespace,
        context=context,
        settings=settings,
        logger=logger,
    )
    return sum(1 for pod in pods if is_pod_ready(pod))


def make_counter(
        *,
        namespace: str,
        context: auth.APIContext,
        settings: configuration.WaiterSettings,
        logger: typedefs.Logger,
) -> Callable[[str, str], Awaitable[int]]:
    """
    Bind the connection-specific arguments, leave only the label selector.
    """
    return functools.partial(
        count_ready_pods,
        namespace=namespace,
        context=context,
        settings=settings,
        logger=logger,
    )
