"""
The readiness conditions implied by the way Apicurito was installed.

When installed by the operator, the operator's own pods are up first,
and the service pods are created by it from the custom resource.
When installed from the template, only the UI pod is created.
When the operator is installed from its separate manifests (CRD, roles, deployment),
its custom resource asks for more replicas of the service.
"""
import enum
from typing import NamedTuple, Optional

from curito._cogs.configs import configuration
from curito._cogs.structs import components, requests


class InstallMode(enum.Enum):
    OPERATOR = 'operator'
    TEMPLATE = 'template'
    OPERATOR_MANIFESTS = 'operator-manifests'


class Profile(NamedTuple):
    expected_pods: int
    component: components.Component


PROFILES = {
    InstallMode.OPERATOR: Profile(expected_pods=2, component=components.Component.SERVICE),
    InstallMode.TEMPLATE: Profile(expected_pods=1, component=components.Component.UI),
    InstallMode.OPERATOR_MANIFESTS: Profile(expected_pods=6, component=components.Component.SERVICE),
}


def profile_for(
        mode: InstallMode,
        settings: Optional[configuration.WaiterSettings] = None,
) -> requests.WaitRequest:
    settings = settings if settings is not None else configuration.WaiterSettings()
    profile = PROFILES[mode]
    return requests.WaitRequest(
        label_key=settings.cluster.label_key,
        expected_pods=profile.expected_pods,
        components={profile.component},
        interval=settings.waiting.interval,
        timeout=settings.waiting.timeout,
        overall_timeout=settings.waiting.overall_timeout,
        strategy=settings.waiting.strategy,
    )
