"""
The main module for all the exported functions & classes.
"""
# isort: skip_file

# Unlike all other places, where we import other modules and refer
# the functions via the modules, this is the tooling's top-level interface,
# as it is seen by the users. So, we export the individual functions.

from curito._cogs.configs.configuration import (
    WaiterSettings,
    WaitingSettings,
    NetworkingSettings,
    ClusterSettings,
)
from curito._cogs.configs.profiles import (
    InstallMode,
    profile_for,
)
from curito._cogs.clients.auth import (
    APIContext,
)
from curito._cogs.clients.errors import (
    APIError,
    APIClientError,
    APIServerError,
    APIUnauthorizedError,
    APIForbiddenError,
    APINotFoundError,
    APIConflictError,
)
from curito._cogs.clients.fetching import (
    count_ready_pods,
    make_counter,
)
from curito._cogs.helpers.typedefs import (
    Logger,
)
from curito._cogs.helpers.versions import (
    version as __version__,
)
from curito._cogs.structs.components import (
    Component,
)
from curito._cogs.structs.credentials import (
    LoginError,
    ConnectionInfo,
)
from curito._cogs.structs.outcomes import (
    FailureKind,
    WaitOutcome,
    NotReadyError,
    ReadinessTimeoutError,
    OverallTimeoutError,
    InterruptedWait,
)
from curito._cogs.structs.requests import (
    ReadinessStrategy,
    WaitRequest,
)
from curito._core.engines.loggers import (
    LogFormat,
    configure as configure_logging,
)
from curito._core.engines.readiness import (
    ReadyPodsCounter,
)
from curito._core.intents.piggybacking import (
    login,
    login_via_client,
    login_with_kubeconfig,
    login_with_service_account,
)
from curito._core.reactor.waiting import (
    run,
    waiter,
    wait_for_ready,
)

__all__ = [
    'WaiterSettings', 'WaitingSettings', 'NetworkingSettings', 'ClusterSettings',
    'InstallMode', 'profile_for',
    'APIContext',
    'APIError', 'APIClientError', 'APIServerError',
    'APIUnauthorizedError', 'APIForbiddenError', 'APINotFoundError', 'APIConflictError',
    'count_ready_pods', 'make_counter',
    'Logger',
    'Component',
    'LoginError', 'ConnectionInfo',
    'FailureKind', 'WaitOutcome',
    'NotReadyError', 'ReadinessTimeoutError', 'OverallTimeoutError', 'InterruptedWait',
    'ReadinessStrategy', 'WaitRequest',
    'LogFormat', 'configure_logging',
    'ReadyPodsCounter',
    'login', 'login_via_client', 'login_with_kubeconfig', 'login_with_service_account',
    'run', 'waiter', 'wait_for_ready',
]
