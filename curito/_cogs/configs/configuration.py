"""
All configuration flags, options, settings to fine-tune the waiting.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it).

The settings are constructed once per deployment verification and passed
explicitly to the waiter and its collaborators. There is no process-wide
holder of the settings: two verifications of different deployments
can run in the same process with different settings.

All durations are in seconds.
"""
import dataclasses
from typing import Iterable, Optional

from curito._cogs.structs import requests


@dataclasses.dataclass
class WaitingSettings:

    interval: float = 10
    """
    How often the cluster is re-queried for the ready pods of one component.
    """

    timeout: float = 6 * 60
    """
    How long one component can take to get the expected number of ready pods.
    Once exceeded, this component is considered as failed,
    but other components continue their waiting.
    """

    overall_timeout: float = 20 * 60
    """
    How long the whole waiting can take regardless of the components' own timeouts.
    Once exceeded, all components that are still waiting are cancelled.
    """

    strategy: requests.ReadinessStrategy = requests.ReadinessStrategy.EXACT
    """
    Whether exactly or at least the expected number of pods must be ready.
    """


@dataclasses.dataclass
class NetworkingSettings:

    request_timeout: Optional[float] = 1 * 60
    """
    A timeout for one request to the API (including the retries' responses).
    """

    connect_timeout: Optional[float] = None
    """
    A timeout for the connection establishment, if different from the above.
    """

    error_backoffs: Iterable[float] = (1, 1, 2, 3, 5, 8)
    """
    Backoff intervals in case of API errors (connectivity, 5xx, timeouts).

    The number of backoffs is the number of retries after the first attempt.
    Once all of them are exhausted, the error is escalated to the poller,
    which logs it and retries on its next regular interval.
    """


@dataclasses.dataclass
class ClusterSettings:

    namespace: Optional[str] = None
    """
    The namespace where Apicurito is deployed.
    If ``None``, the default namespace of the credentials is used,
    and then the ``default`` namespace if there is none.
    """

    label_key: str = 'component'
    """
    The label of the pods which contains the component's name.
    """


@dataclasses.dataclass
class WaiterSettings:
    waiting: WaitingSettings = dataclasses.field(default_factory=WaitingSettings)
    networking: NetworkingSettings = dataclasses.field(default_factory=NetworkingSettings)
    cluster: ClusterSettings = dataclasses.field(default_factory=ClusterSettings)
