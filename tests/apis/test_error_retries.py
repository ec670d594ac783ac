import aiohttp.web
import pytest

from curito._cogs.clients.api import request
from curito._cogs.clients.errors import APIError


@pytest.fixture()
def request_fn(mocker):
    return mocker.patch('aiohttp.ClientSession.request')


async def test_regular_errors_escalate_without_retries(
        assert_logs, context, settings, logger, request_fn):
    request_fn.side_effect = Exception("boo")

    settings.networking.error_backoffs = [1, 2, 3]
    with pytest.raises(Exception) as err:
        await request('get', '/url', context=context, settings=settings, logger=logger)

    assert str(err.value) == "boo"
    assert request_fn.call_count == 1
    assert_logs(prohibited=["attempt", "escalating", "retry"])


@pytest.mark.parametrize('status', [400, 401, 403, 404, 409, 499])
async def test_client_errors_escalate_without_retries(
        assert_logs, resp_mocker, aresponses, hostname, context, settings, logger, status):
    mock = resp_mocker(return_value=aresponses.Response(status=status))
    aresponses.add(hostname, '/url', 'get', mock)

    settings.networking.error_backoffs = [1, 2, 3]
    with pytest.raises(APIError) as err:
        await request('get', '/url', context=context, settings=settings, logger=logger)

    assert err.value.status == status
    assert mock.call_count == 1
    assert_logs(prohibited=["attempt", "escalating", "retry"])


@pytest.mark.parametrize('status', [500, 503, 599])
async def test_server_errors_escalate_with_retries(
        assert_logs, resp_mocker, aresponses, hostname, context, settings, logger, status):
    mock = resp_mocker(side_effect=[aresponses.Response(status=status) for _ in range(4)])
    for _ in range(4):
        aresponses.add(hostname, '/url', 'get', mock)

    settings.networking.error_backoffs = [0, 0, 0]
    with pytest.raises(APIError) as err:
        await request('get', '/url', context=context, settings=settings, logger=logger)

    assert err.value.status == status
    assert mock.call_count == 4
    assert_logs([
        "attempt #1/4 failed; will retry",
        "attempt #2/4 failed; will retry",
        "attempt #3/4 failed; will retry",
        "attempt #4/4 failed; escalating",
    ])


async def test_connection_errors_escalate_with_retries(
        assert_logs, context, settings, logger, request_fn):
    request_fn.side_effect = aiohttp.ClientConnectionError()

    settings.networking.error_backoffs = [0, 0, 0]
    with pytest.raises(aiohttp.ClientConnectionError):
        await request('get', '/url', context=context, settings=settings, logger=logger)

    assert request_fn.call_count == 4
    assert_logs([
        "attempt #1/4 failed; will retry",
        "attempt #2/4 failed; will retry",
        "attempt #3/4 failed; will retry",
        "attempt #4/4 failed; escalating",
    ])


async def test_retried_errors_can_succeed_eventually(
        assert_logs, resp_mocker, aresponses, hostname, context, settings, logger):
    mock = resp_mocker(side_effect=[
        aresponses.Response(status=503),
        aiohttp.web.json_response({}),
    ])
    aresponses.add(hostname, '/url', 'get', mock)
    aresponses.add(hostname, '/url', 'get', mock)

    settings.networking.error_backoffs = [0, 0, 0]
    response = await request('get', '/url', context=context, settings=settings, logger=logger)
    response.close()

    assert mock.call_count == 2
    assert_logs([
        "attempt #1/4 failed; will retry",
        "attempt #2/4 succeeded",
    ])


async def test_no_retries_without_backoffs(
        resp_mocker, aresponses, hostname, context, settings, logger):
    mock = resp_mocker(return_value=aresponses.Response(status=503))
    aresponses.add(hostname, '/url', 'get', mock)

    settings.networking.error_backoffs = []
    with pytest.raises(APIError):
        await request('get', '/url', context=context, settings=settings, logger=logger)
    assert mock.call_count == 1
