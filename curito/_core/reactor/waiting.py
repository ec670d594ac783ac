"""
Waiting for all components of a deployment at once.

One task is spawned per component (see :mod:`curito._core.engines.readiness`),
and all of them are joined with a single overall deadline. The waiting ends
when all tasks are finished, when the deadline is reached, or when the stop-flag
is raised externally (e.g. on Ctrl+C or when the test run is aborted).

No task outlives the waiting: the unfinished tasks are cancelled and awaited
before the outcome is returned. The outcome is success only if every task
has been positively observed as succeeded; there is no partial success.
"""
import asyncio
import logging
import signal
import threading
from typing import AbstractSet, Dict, Optional, Set

from curito._cogs.aiokits import aioflags, aiotasks
from curito._cogs.clients import auth, fetching
from curito._cogs.configs import configuration, profiles
from curito._cogs.structs import credentials, outcomes, requests
from curito._cogs.structs.components import Component
from curito._core.engines import loggers, readiness
from curito._core.intents import piggybacking

logger = logging.getLogger(__name__)


def run(
        request: Optional[requests.WaitRequest] = None,
        *,
        mode: profiles.InstallMode = profiles.InstallMode.OPERATOR,
        settings: Optional[configuration.WaiterSettings] = None,
        connection: Optional[credentials.ConnectionInfo] = None,
        counter: Optional[readiness.ReadyPodsCounter] = None,
        stop_flag: Optional[aioflags.Flag] = None,
) -> outcomes.WaitOutcome:
    """
    Run the whole waiting synchronously, in its own event loop.

    This function should be used from the synchronous test fixtures or scripts.
    If the loop is interrupted (e.g. by Ctrl+C), the outcome is "interrupted".
    """
    try:
        return asyncio.run(waiter(
            request=request,
            mode=mode,
            settings=settings,
            connection=connection,
            counter=counter,
            stop_flag=stop_flag,
        ))
    except KeyboardInterrupt:
        logger.warning("The waiting is interrupted by the keyboard.")
        return outcomes.WaitOutcome(failure=outcomes.FailureKind.INTERRUPTED)


async def waiter(
        request: Optional[requests.WaitRequest] = None,
        *,
        mode: profiles.InstallMode = profiles.InstallMode.OPERATOR,
        settings: Optional[configuration.WaiterSettings] = None,
        connection: Optional[credentials.ConnectionInfo] = None,
        counter: Optional[readiness.ReadyPodsCounter] = None,
        stop_flag: Optional[aioflags.Flag] = None,
) -> outcomes.WaitOutcome:
    """
    Prepare everything for the waiting: the credentials, the API session, the signals.

    If the counter is given, the cluster is not accessed at all (e.g. in tests),
    so neither the credentials nor the namespace are needed.
    """
    settings = settings if settings is not None else configuration.WaiterSettings()
    request = request if request is not None else profiles.profile_for(mode, settings)

    # Ctrl+C or SIGTERM stop the waiting gracefully, the same as the external stop-flag.
    loop = asyncio.get_running_loop()
    signal_flag: asyncio.Event = asyncio.Event()
    relay = aiotasks.create_task(_relay_flag(stop_flag, signal_flag), name="stop-flag relay")
    signals_set = _add_signal_handlers(loop, signal_flag)
    try:
        if counter is not None:
            return await wait_for_ready(request, counter=counter, stop_flag=signal_flag)

        info = connection if connection is not None else piggybacking.login(logger=logger)
        namespace = settings.cluster.namespace or info.default_namespace or 'default'
        async with auth.APIContext(info) as context:
            counter = fetching.make_counter(
                namespace=namespace,
                context=context,
                settings=settings,
                logger=logger,
            )
            logger.info(f"Waiting in namespace {namespace!r} at {info.server}.")
            return await wait_for_ready(request, counter=counter, stop_flag=signal_flag)
    finally:
        if signals_set:
            loop.remove_signal_handler(signal.SIGINT)
            loop.remove_signal_handler(signal.SIGTERM)
        await aiotasks.stop([relay], title="stop-flag relay", quiet=True, logger=logger)


async def wait_for_ready(
        request: Optional[requests.WaitRequest] = None,
        *,
        counter: readiness.ReadyPodsCounter,
        stop_flag: Optional[aioflags.Flag] = None,
        label_key: Optional[str] = None,
        expected_pods: Optional[int] = None,
        components: Optional[AbstractSet[Component]] = None,
        interval: Optional[float] = None,
        timeout: Optional[float] = None,
        overall_timeout: Optional[float] = None,
        strategy: requests.ReadinessStrategy = requests.ReadinessStrategy.EXACT,
) -> outcomes.WaitOutcome:
    """
    Wait until all the components are ready, or until the time is over.

    The request can be given either as an object, or as the individual keywords
    (the same as the `WaitRequest` fields), but not both.

    If this coroutine itself is cancelled, all the polling tasks are cancelled
    and awaited first, and then the cancellation is propagated as usual.
    Unexpected errors in the polling tasks are re-raised here too.
    """
    fields = dict(label_key=label_key, expected_pods=expected_pods, components=components,
                  interval=interval, timeout=timeout, overall_timeout=overall_timeout)
    if request is None:
        missing = [name for name, value in fields.items() if value is None]
        if missing:
            raise TypeError(f"Missing fields of the request: {', '.join(missing)}")
        request = requests.WaitRequest(strategy=strategy, **fields)  # type: ignore[arg-type]
    elif any(value is not None for value in fields.values()):
        raise TypeError("Either a request or its individual fields are accepted, not both.")

    loop = asyncio.get_running_loop()
    started = loop.time()
    deadline = started + request.overall_timeout
    logger.info(f"Waiting for {request.expected_pods} ready pods of each of: "
                f"{', '.join(sorted(str(c) for c in request.components))} "
                f"(label {request.label_key!r}; up to {request.overall_timeout}s).")

    # One task per component, all started at once: no component can delay another.
    tasks: Dict[aiotasks.Task, Component] = {}
    for component in sorted(request.components, key=lambda c: c.name):
        coro = readiness.wait_for_component(
            component,
            request=request,
            counter=counter,
            logger=loggers.ComponentLogger(component=component),
        )
        tasks[aiotasks.create_task(coro, name=f"readiness of {component}")] = component
    stopper = aiotasks.create_task(aioflags.wait_flag(stop_flag), name="stop-flag waiter")

    interrupted = False
    finished: Set[aiotasks.Task] = set()
    pending: Set[aiotasks.Task] = set(tasks)
    try:
        while pending and not interrupted:
            remaining = deadline - loop.time()
            if remaining <= 0:
                break
            done, _ = await aiotasks.wait(pending | {stopper}, timeout=remaining,
                                          return_when=asyncio.FIRST_COMPLETED)
            interrupted = stopper in done
            finished |= done - {stopper}
            pending -= done

            # A bug in one task is a bug in all of them: do not wait for the others.
            if any(task.exception() is not None for task in done - {stopper}
                   if not task.cancelled()):
                break
    except asyncio.CancelledError:
        await aiotasks.stop(set(tasks) | {stopper}, title="readiness", logger=logger, cancelled=True)
        raise

    # Stop the unfinished tasks (if any) and make sure they are gone before reporting.
    await aiotasks.stop(pending | {stopper}, title="readiness", quiet=True, logger=logger)
    await aiotasks.reraise(finished)

    outcome = outcomes.WaitOutcome(
        failure=(
            outcomes.FailureKind.INTERRUPTED if pending and interrupted else
            outcomes.FailureKind.OVERALL_TIMEOUT if pending else
            outcomes.FailureKind.TASK_TIMEOUT if not all(_succeeded(t) for t in finished) else
            None
        ),
        ready=frozenset(tasks[task] for task in finished if _succeeded(task)),
        failed=frozenset(tasks[task] for task in finished if not _succeeded(task)),
        unfinished=frozenset(tasks[task] for task in pending),
        elapsed=loop.time() - started,
    )
    if outcome.ok:
        logger.info(outcome.message)
    else:
        logger.error(outcome.message)
    return outcome


def _succeeded(task: aiotasks.Task) -> bool:
    return not task.cancelled() and task.result() is True


def _add_signal_handlers(
        loop: asyncio.AbstractEventLoop,
        flag: asyncio.Event,
) -> bool:
    if threading.current_thread() is not threading.main_thread():
        logger.debug("OS signals are ignored: running not in the main thread.")
        return False
    try:
        loop.add_signal_handler(signal.SIGINT, flag.set)
        loop.add_signal_handler(signal.SIGTERM, flag.set)
    except NotImplementedError:
        logger.warning("OS signals are ignored: can't add signal handler in Windows.")
        return False
    return True


async def _relay_flag(
        stop_flag: Optional[aioflags.Flag],
        signal_flag: asyncio.Event,
) -> None:
    """ Raise the internal flag once the external one is raised (if ever). """
    if stop_flag is not None:
        await aioflags.wait_flag(stop_flag)
        logger.info("Stop-flag is raised. The waiting is stopping.")
        signal_flag.set()
