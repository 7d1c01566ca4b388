"""
Resolution of arbitrary objects to the resources that address them, cached.

Every operation of the generic client starts here: given an object of any
registered kind, find the API group, version, plural name, and the scope
of its resource. Identifying the kind is cheap (a dict lookup in a scheme).
Mapping the kind to a resource can be expensive (API discovery), so it is
done at most once per kind and then cached for the lifetime of the cache.

The cache is an explicit object, not a global: it is created per client
by default, or shared across several clients by passing it explicitly.
"""
import asyncio
import collections
import dataclasses
from typing import Any, Dict, Iterator, Mapping, Optional

from typedkube._cogs.clients import mapping
from typedkube._cogs.structs import references, schemes


@dataclasses.dataclass(frozen=True)
class ObjectMeta:
    """
    A resource of an object together with the object's own identity.

    The identity fields are read from the object at the time of use,
    not at the time of resolution: e.g. a name can be generated by the server.
    """
    resource: references.Resource
    obj: Mapping[str, Any]

    @property
    def name(self) -> Optional[str]:
        return self.obj.get('metadata', {}).get('name')

    @property
    def namespace(self) -> references.Namespace:
        return self.obj.get('metadata', {}).get('namespace')

    @property
    def namespaced(self) -> bool:
        return self.resource.namespaced


class Resolver:
    """
    Resolve the objects to their resources: via a scheme & a REST mapper.

    Errors are escalated as is, with no retries: they mean that the kind is
    not registered, which is a programming or configuration error.
    """

    def __init__(
            self,
            *,
            scheme: schemes.Scheme,
            mapper: mapping.RESTMapper,
    ) -> None:
        super().__init__()
        self.scheme = scheme
        self.mapper = mapper

    def identify(self, obj: Any) -> references.GroupVersionKind:
        """
        Identify the kind of an object, as used for the resource lookups.

        The lists are identified as their items' kinds (e.g. ``PodList`` as ``Pod``):
        both are served by the same resource.
        """
        gvk = self.scheme.object_kind(obj)
        if gvk.kind.endswith('List') and self.scheme.is_list(obj):
            gvk = gvk._replace(kind=gvk.kind[:-4])
        return gvk

    async def resolve(self, gvk: references.GroupVersionKind) -> references.Resource:
        return await self.mapper.resource_for(gvk)


class MetadataCache:
    """
    A memo of the resolved resources per kind, with single-flight resolution.

    Once a kind is resolved, all further lookups are lock-free dict lookups.
    The first-time lookups of the same kind are serialised with a per-kind lock,
    so that the resolver runs only once for every kind even if many tasks need
    the same kind at the same time. The lookups of different kinds do not wait
    for each other. The locks exist only while someone resolves or waits.

    Failed resolutions are not remembered: the next lookup tries again.
    A cancelled resolution (e.g. due to a timeout of the operation) also leaves
    no trace in the cache, and releases the lock for the next waiter.

    An invalidation wins over the resolutions that are in flight at that moment:
    their results are returned to their callers, but are not remembered.

    All the lookups are expected to happen in one event loop (as the client's
    requests do); the cache is not designed for multi-threaded access.
    """

    def __init__(self, resolver: Resolver) -> None:
        super().__init__()
        self._resolver = resolver
        self._resources: Dict[references.GroupVersionKind, references.Resource] = {}
        self._locks: Dict[references.GroupVersionKind, asyncio.Lock] = {}
        self._lockers: Dict[references.GroupVersionKind, int] = collections.Counter()
        self._generation = 0  # of invalidations

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}: {list(self._resources)!r}>'

    def __len__(self) -> int:
        return len(self._resources)

    def __iter__(self) -> Iterator[references.GroupVersionKind]:
        return iter(self._resources)

    def __contains__(self, gvk: object) -> bool:
        return gvk in self._resources

    async def get_resource(self, obj: Any) -> references.Resource:
        """
        Resolve the resource by the object's type only (not by its content).

        This is used when the object is only a target for decoding, e.g.
        an empty object for fetching or listing; its identity comes from elsewhere.
        """
        gvk = self._resolver.identify(obj)
        try:
            return self._resources[gvk]
        except KeyError:
            pass

        lock = self._locks.setdefault(gvk, asyncio.Lock())
        self._lockers[gvk] += 1
        try:
            async with lock:
                return await self._resolve(gvk)
        finally:
            self._lockers[gvk] -= 1
            if not self._lockers[gvk]:
                del self._lockers[gvk]
                del self._locks[gvk]

    async def _resolve(self, gvk: references.GroupVersionKind) -> references.Resource:
        # Someone else could have resolved it while we were waiting for the lock.
        try:
            return self._resources[gvk]
        except KeyError:
            pass

        generation = self._generation
        resource = await self._resolver.resolve(gvk)
        if generation == self._generation:
            self._resources[gvk] = resource
        return resource

    async def get_object_meta(self, obj: Mapping[str, Any]) -> ObjectMeta:
        """
        Resolve the resource of an object, and bind it to the object's identity.
        """
        resource = await self.get_resource(obj)
        return ObjectMeta(resource=resource, obj=obj)

    def invalidate(self, gvk: Optional[references.GroupVersionKind] = None) -> None:
        """ Forget one kind or all of them, so that they are re-resolved on the next use. """
        self._generation += 1
        if gvk is None:
            self._resources.clear()
        else:
            self._resources.pop(gvk, None)
