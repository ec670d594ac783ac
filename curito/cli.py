import dataclasses
import functools
from typing import Any, Callable, Collection, Optional

import click

from curito._cogs.configs import configuration, profiles
from curito._cogs.structs import components, credentials, requests
from curito._core.engines import loggers
from curito._core.reactor import waiting


class LogFormatParamType(click.Choice):

    def __init__(self) -> None:
        super().__init__(choices=[v.name.lower() for v in loggers.LogFormat])

    def convert(self, value: Any, param: Any, ctx: Any) -> loggers.LogFormat:
        if isinstance(value, loggers.LogFormat):
            return value
        name: str = super().convert(value, param, ctx)
        return loggers.LogFormat[name.upper()]


class InstallModeParamType(click.Choice):

    def __init__(self) -> None:
        super().__init__(choices=[v.value for v in profiles.InstallMode])

    def convert(self, value: Any, param: Any, ctx: Any) -> profiles.InstallMode:
        if isinstance(value, profiles.InstallMode):
            return value
        name: str = super().convert(value, param, ctx)
        return profiles.InstallMode(name)


class ComponentParamType(click.ParamType):
    name = 'component'

    def convert(self, value: Any, param: Any, ctx: Any) -> components.Component:
        if isinstance(value, components.Component):
            return value
        try:
            return components.Component.parse(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


def logging_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to configure logging in all commands the same way."""
    @click.option('-v', '--verbose', is_flag=True)
    @click.option('-d', '--debug', is_flag=True)
    @click.option('-q', '--quiet', is_flag=True)
    @click.option('--log-format', type=LogFormatParamType(), default='full')
    @click.option('--log-refkey', type=str)
    @click.option('--log-prefix/--no-log-prefix', default=None)
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(verbose: bool, quiet: bool, debug: bool,
                log_format: loggers.LogFormat = loggers.LogFormat.FULL,
                log_prefix: Optional[bool] = None,
                log_refkey: Optional[str] = None,
                *args: Any, **kwargs: Any) -> Any:
        loggers.configure(debug=debug, verbose=verbose, quiet=quiet,
                          log_format=log_format, log_refkey=log_refkey, log_prefix=log_prefix)
        return fn(*args, **kwargs)

    return wrapper


@click.version_option(prog_name='curito')
@click.group(name='curito', context_settings=dict(
    auto_envvar_prefix='CURITO',
))
def main() -> None:
    pass


@main.command()
@logging_options
@click.option('--mode', type=InstallModeParamType(), default='operator')
@click.option('-n', '--namespace', type=str)
@click.option('-l', '--label-key', type=str)
@click.option('-p', '--pods', 'expected_pods', type=click.IntRange(min=1), envvar='CURITO_WAIT_PODS')
@click.option('--interval', type=click.FloatRange(min=0, min_open=True))
@click.option('--timeout', type=click.FloatRange(min=0, min_open=True))
@click.option('--overall-timeout', type=click.FloatRange(min=0, min_open=True))
@click.option('--at-least', is_flag=True)
@click.argument('selected', metavar='[COMPONENTS]...', nargs=-1, type=ComponentParamType())
def wait(
        mode: profiles.InstallMode,
        namespace: Optional[str],
        label_key: Optional[str],
        expected_pods: Optional[int],
        interval: Optional[float],
        timeout: Optional[float],
        overall_timeout: Optional[float],
        at_least: bool,
        selected: Collection[components.Component],
) -> None:
    """ Wait until the pods of Apicurito's components are ready. """
    settings = configuration.WaiterSettings()
    settings.cluster.namespace = namespace
    if label_key is not None:
        settings.cluster.label_key = label_key
    if interval is not None:
        settings.waiting.interval = interval
    if timeout is not None:
        settings.waiting.timeout = timeout
    if overall_timeout is not None:
        settings.waiting.overall_timeout = overall_timeout
    if at_least:
        settings.waiting.strategy = requests.ReadinessStrategy.AT_LEAST

    request = profiles.profile_for(mode, settings)
    if expected_pods is not None:
        request = dataclasses.replace(request, expected_pods=expected_pods)
    if selected:
        request = dataclasses.replace(request, components=frozenset(selected))

    try:
        outcome = waiting.run(request, mode=mode, settings=settings)
    except credentials.LoginError as e:
        raise click.ClickException(str(e))

    if not outcome:
        raise click.exceptions.Exit(1)
