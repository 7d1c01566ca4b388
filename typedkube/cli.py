import asyncio
import dataclasses
import functools
import json
from typing import Any, Awaitable, Callable, Collection, Dict, List, Optional, TypeVar

import click
import yaml

from typedkube._cogs.clients import auth, generic
from typedkube._cogs.helpers import loggers
from typedkube._cogs.structs import bodies, credentials, options, patches, references, schemes

_T = TypeVar('_T')


@dataclasses.dataclass()
class CLIControls:
    """ Client controls, which are impossible to pass via CLI (e.g. in tests). """
    scheme: Optional[schemes.Scheme] = None
    client_factory: Optional[Callable[[auth.APIContext], generic.Client]] = None


class LogFormatParamType(click.Choice):

    def __init__(self) -> None:
        super().__init__(choices=[v.name.lower() for v in loggers.LogFormat])

    def convert(self, value: Any, param: Any, ctx: Any) -> loggers.LogFormat:
        if isinstance(value, loggers.LogFormat):
            return value
        name: str = super().convert(value, param, ctx)
        return loggers.LogFormat[name.upper()]


class PatchTypeParamType(click.Choice):

    def __init__(self) -> None:
        super().__init__(choices=['json', 'merge', 'strategic'])

    def convert(self, value: Any, param: Any, ctx: Any) -> patches.PatchType:
        if isinstance(value, patches.PatchType):
            return value
        name: str = super().convert(value, param, ctx)
        return patches.PatchType['STRATEGIC_MERGE' if name == 'strategic' else name.upper()]


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
                log_prefix: Optional[bool] = False,
                log_refkey: Optional[str] = None,
                *args: Any, **kwargs: Any) -> Any:
        loggers.configure(debug=debug, verbose=verbose, quiet=quiet,
                          log_format=log_format, log_refkey=log_refkey, log_prefix=log_prefix)
        return fn(*args, **kwargs)

    return wrapper


def connection_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to accept the API server's connection info in all commands the same way."""
    @click.option('--server', type=str, required=True, envvar='TYPEDKUBE_SERVER')
    @click.option('--token', type=str, default=None, envvar='TYPEDKUBE_TOKEN')
    @click.option('--ca-path', type=click.Path(exists=True, dir_okay=False), default=None)
    @click.option('--insecure', is_flag=True, default=None)
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(server: str, token: Optional[str], ca_path: Optional[str], insecure: Optional[bool],
                *args: Any, **kwargs: Any) -> Any:
        info = credentials.ConnectionInfo(server=server, token=token, ca_path=ca_path,
                                          insecure=insecure, default_namespace='default')
        return fn(*args, info=info, **kwargs)

    return wrapper


def kind_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to identify the objects' kind in all commands the same way."""
    @click.option('--api-version', type=str, required=True)
    @click.option('--kind', type=str, required=True)
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(api_version: str, kind: str, *args: Any, **kwargs: Any) -> Any:
        gvk = references.GroupVersionKind.parse(api_version, kind)
        return fn(*args, gvk=gvk, **kwargs)

    return wrapper


@click.version_option(prog_name='typedkube')
@click.group(name='typedkube', context_settings=dict(
    auto_envvar_prefix='TYPEDKUBE',
))
def main() -> None:
    pass


@main.command()
@logging_options
@connection_options
@kind_options
@click.option('-n', '--namespace', type=str, default=None)
@click.option('-o', '--output', type=click.Choice(['yaml', 'json']), default='yaml')
@click.argument('name', type=str)
@click.make_pass_decorator(CLIControls, ensure=True)
def get(
        __controls: CLIControls,
        info: credentials.ConnectionInfo,
        gvk: references.GroupVersionKind,
        namespace: Optional[str],
        output: str,
        name: str,
) -> None:
    """ Fetch one object by its name. """
    async def fn(client: generic.Client) -> Dict[str, Any]:
        obj = client.scheme.new(gvk)
        key = references.ObjectKey(name=name, namespace=namespace or info.default_namespace)
        await client.get(key, obj)
        return obj

    _echo(_run(__controls, info, fn), output=output)


@main.command(name='list')
@logging_options
@connection_options
@kind_options
@click.option('-n', '--namespace', type=str, default=None)
@click.option('-A', '--all-namespaces', 'clusterwide', is_flag=True)
@click.option('-l', '--selector', type=str, default=None)
@click.option('--field-selector', type=str, default=None)
@click.option('--limit', type=int, default=None)
@click.option('-o', '--output', type=click.Choice(['yaml', 'json']), default='yaml')
@click.make_pass_decorator(CLIControls, ensure=True)
def list_(
        __controls: CLIControls,
        info: credentials.ConnectionInfo,
        gvk: references.GroupVersionKind,
        namespace: Optional[str],
        clusterwide: bool,
        selector: Optional[str],
        field_selector: Optional[str],
        limit: Optional[int],
        output: str,
) -> None:
    """ List the objects of a kind, all of them or by selectors. """
    if namespace and clusterwide:
        raise click.UsageError("Either --namespace or --all-namespaces can be used, not both.")

    fns: List[options.OptionFn] = []
    if not clusterwide:
        fns.append(options.in_namespace(namespace or info.default_namespace))
    if selector:
        labels = parse_selector(selector)
        fns.append(options.matching_labels({k: v for k, v in labels.items() if v is not None}))
        fns.append(options.has_labels(*[k for k, v in labels.items() if v is None]))
    if field_selector:
        fields = parse_selector(field_selector)
        fns.append(options.matching_fields({k: v or '' for k, v in fields.items()}))
    if limit is not None:
        fns.append(options.limit(limit))

    async def fn(client: generic.Client) -> Dict[str, Any]:
        objs = client.scheme.new(gvk._replace(kind=f'{gvk.kind}List'))
        await client.list(objs, *fns)
        return objs

    _echo(_run(__controls, info, fn), output=output)


@main.command()
@logging_options
@connection_options
@click.option('-f', '--filename', 'paths', multiple=True, required=True,
              type=click.Path(exists=True, dir_okay=False))
@click.option('-n', '--namespace', type=str, default=None)
@click.option('--dry-run', is_flag=True)
@click.option('-o', '--output', type=click.Choice(['yaml', 'json']), default='yaml')
@click.make_pass_decorator(CLIControls, ensure=True)
def create(
        __controls: CLIControls,
        info: credentials.ConnectionInfo,
        paths: Collection[str],
        namespace: Optional[str],
        dry_run: bool,
        output: str,
) -> None:
    """ Create the objects from YAML files (multi-document files are supported). """
    docs: List[Dict[str, Any]] = []
    for path in paths:
        with open(path, 'rt', encoding='utf-8') as f:
            docs.extend(doc for doc in yaml.safe_load_all(f) if doc)

    fns: List[options.OptionFn] = [options.dry_run_all] if dry_run else []

    async def fn(client: generic.Client) -> List[Dict[str, Any]]:
        created: List[Dict[str, Any]] = []
        for doc in docs:
            obj = bodies.Object(doc)
            if namespace is not None:
                obj.namespace = namespace
            resource = await client.cache.get_resource(obj)
            if resource.namespaced and not obj.namespace:
                obj.namespace = info.default_namespace
            await client.create(obj, *fns)
            created.append(obj)
        return created

    for obj in _run(__controls, info, fn):
        _echo(obj, output=output)


@main.command()
@logging_options
@connection_options
@kind_options
@click.option('-n', '--namespace', type=str, default=None)
@click.option('--grace-period', type=int, default=None)
@click.option('--cascade', type=click.Choice([p.value for p in options.PropagationPolicy]),
              default=None)
@click.option('--dry-run', is_flag=True)
@click.argument('name', type=str)
@click.make_pass_decorator(CLIControls, ensure=True)
def delete(
        __controls: CLIControls,
        info: credentials.ConnectionInfo,
        gvk: references.GroupVersionKind,
        namespace: Optional[str],
        grace_period: Optional[int],
        cascade: Optional[str],
        dry_run: bool,
        name: str,
) -> None:
    """ Delete one object by its name. """
    fns: List[options.OptionFn] = [options.dry_run_all] if dry_run else []
    if grace_period is not None:
        fns.append(options.grace_period(grace_period))
    if cascade is not None:
        fns.append(options.propagation_policy(options.PropagationPolicy(cascade)))

    async def fn(client: generic.Client) -> None:
        obj = bodies.Object(client.scheme.new(gvk))
        obj.name = name
        obj.namespace = namespace or info.default_namespace
        await client.delete(obj, *fns)

    _run(__controls, info, fn)
    click.echo(f"Deleted {gvk.kind} {name!r}.")


@main.command()
@logging_options
@connection_options
@kind_options
@click.option('-n', '--namespace', type=str, default=None)
@click.option('-t', '--type', 'patch_type', type=PatchTypeParamType(), default='merge')
@click.option('-p', '--patch', 'patch_text', type=str, required=True)
@click.option('--dry-run', is_flag=True)
@click.option('-o', '--output', type=click.Choice(['yaml', 'json']), default='yaml')
@click.argument('name', type=str)
@click.make_pass_decorator(CLIControls, ensure=True)
def patch(
        __controls: CLIControls,
        info: credentials.ConnectionInfo,
        gvk: references.GroupVersionKind,
        namespace: Optional[str],
        patch_type: patches.PatchType,
        patch_text: str,
        dry_run: bool,
        output: str,
        name: str,
) -> None:
    """ Patch one object by its name with a literal JSON/YAML patch. """
    try:
        patch_data = yaml.safe_load(patch_text)
    except yaml.YAMLError as e:
        raise click.BadParameter(f"The patch is neither JSON nor YAML: {e}", param_hint='--patch')

    fns: List[options.OptionFn] = [options.dry_run_all] if dry_run else []

    async def fn(client: generic.Client) -> Dict[str, Any]:
        obj = bodies.Object(client.scheme.new(gvk))
        obj.name = name
        obj.namespace = namespace or info.default_namespace
        await client.patch(obj, patches.RawPatch(patch_type, patch_data), *fns)
        return obj

    _echo(_run(__controls, info, fn), output=output)


def parse_selector(selector: str) -> Dict[str, Optional[str]]:
    """ Parse ``a=b,c`` into ``{'a': 'b', 'c': None}``: the values are optional. """
    result: Dict[str, Optional[str]] = {}
    for part in selector.split(','):
        key, eq, val = part.strip().partition('=')
        if key:
            result[key.strip()] = val.strip() if eq else None
    return result


def _run(
        __controls: CLIControls,
        info: credentials.ConnectionInfo,
        fn: Callable[[generic.Client], Awaitable[_T]],
) -> _T:
    async def _main() -> _T:
        async with auth.APIContext(info) as context:
            if __controls.client_factory is not None:
                client = __controls.client_factory(context)
            else:
                client = generic.Client(context=context, scheme=__controls.scheme)
            return await fn(client)

    try:
        return asyncio.run(_main())
    except Exception as e:
        raise click.ClickException(f"{type(e).__name__}: {e}") from e


def _echo(obj: Dict[str, Any], *, output: str) -> None:
    if output == 'json':
        click.echo(json.dumps(obj, indent=2))
    else:
        click.echo(yaml.safe_dump(dict(obj), sort_keys=False).rstrip('\n'))
        click.echo('---')
