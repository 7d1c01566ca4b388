"""
Discovery of the resources served by the API server.

The core group is served under ``/api/{version}``, all other groups
under ``/apis/{group}/{version}``. Every group-version lists its resources
and their subresources (e.g. ``pods/status``) flatly, side by side.
"""
import asyncio
from typing import Any, Collection, Dict, Iterator, List, Mapping, Optional, Set, Tuple

from typedkube._cogs.clients import api, auth, errors
from typedkube._cogs.configs import configuration
from typedkube._cogs.helpers import typedefs
from typedkube._cogs.structs import references

GroupVersion = Tuple[str, str]


async def scan_resources(
        *,
        context: auth.APIContext,
        settings: configuration.ClientSettings,
        logger: typedefs.Logger,
        groups: Optional[Collection[str]] = None,
) -> Collection[references.Resource]:
    """
    Discover the resources served by the API server, optionally by groups only.

    The core API (``/api``) is the group ``""``; all others are under ``/apis``.
    """
    versions = await _list_versions(
        groups=groups, context=context, settings=settings, logger=logger)
    payloads = await asyncio.gather(*[
        _read_version(group, version, context=context, settings=settings, logger=logger)
        for group, version in versions
    ])
    return {
        resource
        for (group, version), payload in zip(versions, payloads)
        for resource in _parse_resources(group, version, payload)
    }


async def _list_versions(
        *,
        context: auth.APIContext,
        settings: configuration.ClientSettings,
        logger: typedefs.Logger,
        groups: Optional[Collection[str]],
) -> List[GroupVersion]:
    versions: List[GroupVersion] = []
    if groups is None or '' in groups:
        core = await api.get('/api', context=context, settings=settings, logger=logger)
        versions.extend(('', version) for version in core['versions'])
    if groups is None or set(groups) - {''}:
        apis = await api.get('/apis', context=context, settings=settings, logger=logger)
        versions.extend(
            (group['name'], version['version'])
            for group in apis['groups'] if groups is None or group['name'] in groups
            for version in group['versions']
        )
    return versions


async def _read_version(
        group: str,
        version: str,
        *,
        context: auth.APIContext,
        settings: configuration.ClientSettings,
        logger: typedefs.Logger,
) -> Mapping[str, Any]:
    url = f'/apis/{group}/{version}' if group else f'/api/{version}'
    try:
        return await api.get(url, context=context, settings=settings, logger=logger)
    except (errors.APINotFoundError, errors.APIForbiddenError):
        # Gone since listed (the last CRD of the group-version was deleted), or not permitted.
        return {}


def _parse_resources(
        group: str,
        version: str,
        payload: Mapping[str, Any],
) -> Iterator[references.Resource]:
    entries = payload.get('resources', [])
    subresources: Dict[str, Set[str]] = {}
    for entry in entries:
        if '/' in entry['name']:
            plural, subresource = entry['name'].split('/', 1)
            subresources.setdefault(plural, set()).add(subresource)

    for entry in entries:
        if '/' not in entry['name']:
            yield references.Resource(
                group=group,
                version=version,
                plural=entry['name'],
                kind=entry['kind'],
                singular=entry.get('singularName') or entry['kind'].lower(),  # empty in K3s
                shortcuts=frozenset(entry.get('shortNames') or []),
                subresources=frozenset(subresources.get(entry['name'], ())),
                namespaced=entry['namespaced'],
                verbs=frozenset(entry.get('verbs') or []),
            )
