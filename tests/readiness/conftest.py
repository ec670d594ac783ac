import pytest

from curito._cogs.structs.components import Component
from curito._cogs.structs.requests import WaitRequest
from curito._core.engines.loggers import ComponentLogger


@pytest.fixture()
def wait_request():
    return WaitRequest(
        label_key='component',
        expected_pods=2,
        components={Component.SERVICE},
        interval=10,
        timeout=360,
        overall_timeout=1200,
    )


@pytest.fixture()
def component_logger():
    return ComponentLogger(component=Component.SERVICE)
