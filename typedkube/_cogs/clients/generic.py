"""
The generic client: create, update, delete, patch, get, list objects of any kind.

There is no per-kind code anywhere: every operation resolves the object's
resource via the metadata cache, applies the option functions to a fresh
options value, assembles the request via the request builder, executes it,
and decodes the response back into the caller's object in place::

    client = typedkube.Client(context=context, scheme=scheme)

    pod = Pod(metadata={'generateName': 'example-', 'namespace': 'default'}, spec={...})
    await client.create(pod, typedkube.field_owner('me'))
    print(pod.name)  # as generated by the server

    pods = PodList()
    await client.list(pods, typedkube.in_namespace('default'), typedkube.limit(10))

    fetched = Pod()
    await client.get(typedkube.ObjectKey(name=pod.name, namespace='default'), fetched)

Any error of the resolution, of the options, or of the patch encoding stops
the operation before anything is sent to the API server. Any error of the API
is escalated to the caller as is: the client neither retries nor interprets it.
"""
import logging
from typing import Any, Mapping, MutableMapping, Optional, Union

from typedkube._cogs.clients import auth, errors, mapping, requests, resolving
from typedkube._cogs.configs import configuration
from typedkube._cogs.helpers import typedefs
from typedkube._cogs.structs import options, patches, references, schemes

STATUS_SUBRESOURCE = 'status'


class Client:
    """
    A client to manipulate the objects of any registered kinds in one API server.

    By default, the kinds are mapped to the resources via the API discovery,
    and a new metadata cache is created for every client. A cache (or a mapper)
    can be injected explicitly: e.g. to share the cache between several clients,
    or to avoid the discovery calls with a static mapper.
    """

    def __init__(
            self,
            *,
            context: auth.APIContext,
            scheme: Optional[schemes.Scheme] = None,
            mapper: Optional[mapping.RESTMapper] = None,
            cache: Optional[resolving.MetadataCache] = None,
            settings: Optional[configuration.ClientSettings] = None,
            logger: Optional[typedefs.Logger] = None,
    ) -> None:
        super().__init__()
        self.settings = settings if settings is not None else configuration.ClientSettings()
        self.logger = logger if logger is not None else logging.getLogger('typedkube.clients')
        self.scheme = scheme if scheme is not None else schemes.make_default_scheme()

        if cache is None:
            if mapper is None:
                mapper = mapping.DiscoveryRESTMapper(
                    context=context,
                    settings=self.settings,
                    logger=self.logger,
                )
            cache = resolving.MetadataCache(resolving.Resolver(scheme=self.scheme, mapper=mapper))
        elif mapper is not None:
            raise ValueError("Either a mapper or a cache can be passed, not both.")

        self.cache = cache
        self.rest = requests.RESTClient(context=context, settings=self.settings, logger=self.logger)

    def status(self) -> "StatusWriter":
        return StatusWriter(self)

    async def create(
            self,
            obj: MutableMapping[str, Any],
            *fns: options.OptionFn,
            timeout: Optional[float] = None,
    ) -> None:
        meta = await self.cache.get_object_meta(obj)
        create_options = options.CreateOptions().apply(fns)
        result = await (
            self.rest.post()
            .namespace_if_scoped(meta.namespace, meta.namespaced)
            .resource(meta.resource)
            .body(self._as_sent(obj))
            .versioned_params(create_options.as_params(), options.encode_params)
            .timeout(timeout)
            .do()
        )
        result.into(obj, kind=self._kind_of(obj))

    async def update(
            self,
            obj: MutableMapping[str, Any],
            *fns: options.OptionFn,
            timeout: Optional[float] = None,
    ) -> None:
        meta = await self.cache.get_object_meta(obj)
        update_options = options.UpdateOptions().apply(fns)
        result = await (
            self.rest.put()
            .namespace_if_scoped(meta.namespace, meta.namespaced)
            .resource(meta.resource)
            .name(meta.name)
            .body(self._as_sent(obj))
            .versioned_params(update_options.as_params(), options.encode_params)
            .timeout(timeout)
            .do()
        )
        result.into(obj, kind=self._kind_of(obj))

    async def delete(
            self,
            obj: Mapping[str, Any],
            *fns: options.OptionFn,
            timeout: Optional[float] = None,
    ) -> None:
        meta = await self.cache.get_object_meta(obj)
        delete_options = options.DeleteOptions().apply(fns)
        await (
            self.rest.delete()
            .namespace_if_scoped(meta.namespace, meta.namespaced)
            .resource(meta.resource)
            .name(meta.name)
            .body(delete_options.as_body())
            .timeout(timeout)
            .do()
        )

    async def patch(
            self,
            obj: MutableMapping[str, Any],
            patch: patches.Patch,
            *fns: options.OptionFn,
            timeout: Optional[float] = None,
    ) -> None:
        await self._patch(obj, patch, fns, subresource=None, timeout=timeout)

    async def get(
            self,
            key: Union[references.ObjectKey, str],
            obj: MutableMapping[str, Any],
            *,
            timeout: Optional[float] = None,
    ) -> None:
        # The object is only a target: its kind says where to look, the key says what to look for.
        key = key if isinstance(key, references.ObjectKey) else references.ObjectKey(name=key)
        resource = await self.cache.get_resource(obj)
        result = await (
            self.rest.get()
            .namespace_if_scoped(key.namespace, resource.namespaced)
            .resource(resource)
            .name(key.name)
            .timeout(timeout)
            .do()
        )
        result.into(obj, kind=self._kind_of(obj))

    async def list(
            self,
            obj: MutableMapping[str, Any],
            *fns: options.OptionFn,
            timeout: Optional[float] = None,
    ) -> None:
        resource = await self.cache.get_resource(obj)
        list_options = options.ListOptions().apply(fns)
        result = await (
            self.rest.get()
            .namespace_if_scoped(list_options.namespace, resource.namespaced)
            .resource(resource)
            .versioned_params(list_options.as_params(), options.encode_params)
            .timeout(timeout)
            .do()
        )
        result.into(obj, kind=self._kind_of(obj))

    async def update_status(
            self,
            obj: MutableMapping[str, Any],
            *fns: options.OptionFn,
            timeout: Optional[float] = None,
    ) -> None:
        meta = await self.cache.get_object_meta(obj)
        update_options = options.UpdateOptions().apply(fns)
        result = await (
            self.rest.put()
            .namespace_if_scoped(meta.namespace, meta.namespaced)
            .resource(meta.resource)
            .name(meta.name)
            .subresource(STATUS_SUBRESOURCE)
            .body(self._as_sent(obj))
            .versioned_params(update_options.as_params(), options.encode_params)
            .timeout(timeout)
            .do()
        )
        result.into(obj, kind=self._kind_of(obj))

    async def _patch(
            self,
            obj: MutableMapping[str, Any],
            patch: patches.Patch,
            fns: Any,
            *,
            subresource: Optional[str],
            timeout: Optional[float],
    ) -> None:
        meta = await self.cache.get_object_meta(obj)

        # From the object's current state, before the response overwrites it.
        # The applied configuration is a whole object, so it must say what it is.
        source = self._as_sent(obj) if patch.type == patches.PatchType.APPLY else obj
        try:
            data = patch.data(source)
        except Exception as e:
            raise errors.PatchEncodingError(f"Cannot encode the patch {patch!r}: {e}") from e

        patch_options = options.PatchOptions().apply(fns)
        request = (
            self.rest.patch(patch.type)
            .namespace_if_scoped(meta.namespace, meta.namespaced)
            .resource(meta.resource)
            .name(meta.name)
            .body(data)
            .versioned_params(patch_options.as_params(), options.encode_params)
            .timeout(timeout)
        )
        if subresource is not None:
            request = request.subresource(subresource)
        result = await request.do()
        result.into(obj, kind=self._kind_of(obj))

    def _kind_of(self, obj: Mapping[str, Any]) -> str:
        return self.scheme.object_kind(obj).kind

    def _as_sent(self, obj: Mapping[str, Any]) -> Mapping[str, Any]:
        # Typed objects usually have no apiVersion & kind in them, but the API requires both.
        gvk = self.scheme.object_kind(obj)
        return {'apiVersion': gvk.api_version, 'kind': gvk.kind, **obj}


class StatusWriter:
    """
    Writes to the status subresource only: the object's spec is never modified.

    The API server ignores all the fields except the status on such requests,
    even if they are changed in the object.
    """

    def __init__(self, client: Client) -> None:
        super().__init__()
        self._client = client

    async def update(
            self,
            obj: MutableMapping[str, Any],
            *fns: options.OptionFn,
            timeout: Optional[float] = None,
    ) -> None:
        await self._client.update_status(obj, *fns, timeout=timeout)

    async def patch(
            self,
            obj: MutableMapping[str, Any],
            patch: patches.Patch,
            *fns: options.OptionFn,
            timeout: Optional[float] = None,
    ) -> None:
        await self._client._patch(obj, patch, fns, subresource=STATUS_SUBRESOURCE, timeout=timeout)
