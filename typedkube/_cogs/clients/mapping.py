"""
Mapping of the objects' kinds to the resources as served by the API server.

A kind (e.g. ``apps/v1, Kind=Deployment``) says nothing about how to address
its objects. The resource does: its plural name (``deployments``) for the URLs,
and whether it is namespaced or cluster-scoped. This knowledge comes from
the API server's discovery endpoints, or is provided statically.
"""
import asyncio
import collections
from typing import Collection, Dict, Iterable, Optional

from typing_extensions import Protocol

from typedkube._cogs.clients import auth, errors, scanning
from typedkube._cogs.configs import configuration
from typedkube._cogs.helpers import typedefs
from typedkube._cogs.structs import references


class RESTMapper(Protocol):
    async def resource_for(self, gvk: references.GroupVersionKind) -> references.Resource: ...


class StaticRESTMapper:
    """
    A mapper with the explicitly added resources only, no API calls.

    Usage::

        mapper = StaticRESTMapper([
            Resource('', 'v1', 'pods', kind='Pod', namespaced=True),
            Resource('', 'v1', 'nodes', kind='Node', namespaced=False),
        ])
    """

    def __init__(self, resources: Iterable[references.Resource] = ()) -> None:
        super().__init__()
        self._resources: Dict[references.GroupVersionKind, references.Resource] = {}
        for resource in resources:
            self.add(resource)

    def add(self, resource: references.Resource) -> None:
        if not resource.kind:
            raise ValueError(f"The resource {resource!r} has no kind, so it cannot be mapped.")
        self._resources[resource.gvk] = resource

    async def resource_for(self, gvk: references.GroupVersionKind) -> references.Resource:
        try:
            return self._resources[gvk]
        except KeyError:
            raise errors.NoResourceMatchError(f"No resource is known for {gvk}.") from None


class DiscoveryRESTMapper:
    """
    A mapper that discovers the resources from the API server on demand.

    Only the requested API groups are scanned, once per group (all versions
    of the group at once). If a kind is not found in an already scanned group,
    the group is re-scanned once more in case the kind was added since then
    (e.g. a CRD was installed); if it is still absent, the mapping fails.

    Concurrent requests for the same group wait for the same scanning
    instead of scanning in parallel; different groups do not block each other.
    """

    def __init__(
            self,
            *,
            context: auth.APIContext,
            settings: configuration.ClientSettings,
            logger: typedefs.Logger,
    ) -> None:
        super().__init__()
        self._context = context
        self._settings = settings
        self._logger = logger
        self._scanned: Dict[str, Dict[references.GroupVersionKind, references.Resource]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lockers: Dict[str, int] = collections.Counter()
        self._generation = 0  # of resets

    async def resource_for(self, gvk: references.GroupVersionKind) -> references.Resource:
        resources = self._scanned.get(gvk.group)
        if resources is None or gvk not in resources:
            resources = await self._scan(gvk.group, stale=resources)
        try:
            return resources[gvk]
        except KeyError:
            raise errors.NoResourceMatchError(f"No resource is served for {gvk}.") from None

    def reset(self, groups: Optional[Collection[str]] = None) -> None:
        """ Forget the scanned groups, so that they are re-scanned on the next use. """
        self._generation += 1
        for group in list(self._scanned) if groups is None else groups:
            self._scanned.pop(group, None)

    async def _scan(
            self,
            group: str,
            stale: Optional[Dict[references.GroupVersionKind, references.Resource]],
    ) -> Dict[references.GroupVersionKind, references.Resource]:
        lock = self._locks.setdefault(group, asyncio.Lock())
        self._lockers[group] += 1
        try:
            async with lock:

                # Someone else could have scanned it while we were waiting for the lock.
                current = self._scanned.get(group)
                if current is not None and current is not stale:
                    return current

                self._logger.debug(f"Scanning the API group {group or 'core'!r} for resources.")
                generation = self._generation
                resources = await scanning.scan_resources(
                    groups={group},
                    context=self._context,
                    settings=self._settings,
                    logger=self._logger,
                )
                scanned = {resource.gvk: resource for resource in resources if resource.kind}
                if generation == self._generation:  # not reset while scanning
                    self._scanned[group] = scanned
                return scanned
        finally:
            self._lockers[group] -= 1
            if not self._lockers[group]:
                del self._lockers[group]
                del self._locks[group]
