"""
Assembly of the API requests: one fluent protocol for all verbs and resources.

Every operation of the generic client composes its request the same way::

    result = await (rest.put()
        .namespace_if_scoped(meta.namespace, meta.namespaced)
        .resource(meta.resource)
        .name(meta.name)
        .subresource('status')
        .body(obj)
        .versioned_params(options.as_params(), options_codec)
        .timeout(timeout)
        .do())
    result.into(obj)

The configuration calls only remember the values; nothing is sent until
:meth:`Request.do`. The URL is built from the remembered values regardless
of the order of the calls.

The namespace goes to the URL only if the resource is namespaced, as decided
by the resource's discovered scope, never by the caller's intent. A namespace
of a cluster-scoped object is silently ignored. A namespaced object without
a namespace is addressed cluster-wide (which makes sense only for listing).
"""
import json
from typing import Any, Callable, Dict, List, Mapping, MutableMapping, Optional, Tuple, Union

import aiohttp

from typedkube._cogs.clients import api, auth, errors
from typedkube._cogs.configs import configuration
from typedkube._cogs.helpers import typedefs
from typedkube._cogs.structs import bodies, patches, references

ParameterCodec = Callable[[Mapping[str, Any]], List[Tuple[str, str]]]


class RESTClient:
    """
    A factory of requests to one API server: one entry point per HTTP verb.
    """

    def __init__(
            self,
            *,
            context: auth.APIContext,
            settings: configuration.ClientSettings,
            logger: typedefs.Logger,
    ) -> None:
        super().__init__()
        self.context = context
        self.settings = settings
        self.logger = logger

    def verb(self, method: str, headers: Optional[Mapping[str, str]] = None) -> "Request":
        return Request(
            method=method,
            headers=headers,
            context=self.context,
            settings=self.settings,
            logger=self.logger,
        )

    def post(self) -> "Request":
        return self.verb('post')

    def put(self) -> "Request":
        return self.verb('put')

    def patch(self, patch_type: patches.PatchType) -> "Request":
        return self.verb('patch', headers={'Content-Type': patches.PatchType(patch_type).value})

    def delete(self) -> "Request":
        return self.verb('delete')

    def get(self) -> "Request":
        return self.verb('get')


class Request:
    """
    A single request being configured, and then executed.

    Every request is used only once: configured, executed, and then thrown away.
    """

    def __init__(
            self,
            *,
            method: str,
            context: auth.APIContext,
            settings: configuration.ClientSettings,
            logger: typedefs.Logger,
            headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        super().__init__()
        self._method = method
        self._context = context
        self._settings = settings
        self._logger = logger
        self._headers: Dict[str, str] = dict(headers or {})
        self._resource: Optional[references.Resource] = None
        self._namespace: references.Namespace = None
        self._name: Optional[str] = None
        self._subresource: Optional[str] = None
        self._payload: Optional[object] = None
        self._data: Optional[bytes] = None
        self._params: List[Tuple[str, str]] = []
        self._timeout: Optional[aiohttp.ClientTimeout] = None

    def __repr__(self) -> str:
        plural = self._resource.plural if self._resource is not None else None
        return f'<{self.__class__.__name__}: {self.verb} {plural} {self._name or ""}>'

    @property
    def verb(self) -> str:
        return self._method.upper()

    @property
    def headers(self) -> Mapping[str, str]:
        return dict(self._headers)

    @property
    def params(self) -> List[Tuple[str, str]]:
        return list(self._params)

    @property
    def url(self) -> str:
        if self._resource is None:
            raise errors.InvalidRequestError("The resource is not set for the request.")
        return self._resource.get_url(
            namespace=self._namespace,
            name=self._name,
            subresource=self._subresource,
            params=self._params,
        )

    def namespace_if_scoped(self, namespace: Optional[str], namespaced: bool) -> "Request":
        self._namespace = references.NamespaceName(namespace) if namespaced and namespace else None
        return self

    def resource(self, resource: references.Resource) -> "Request":
        self._resource = resource
        return self

    def name(self, name: Optional[str]) -> "Request":
        if not name:
            raise errors.InvalidRequestError("The object's name may not be empty.")
        self._name = name
        return self

    def subresource(self, subresource: str) -> "Request":
        if not subresource:
            raise errors.InvalidRequestError("The subresource's name may not be empty.")
        self._subresource = subresource
        return self

    def body(self, body: Union[bytes, Mapping[str, Any]]) -> "Request":
        if isinstance(body, bytes):
            self._payload, self._data = None, body
        else:
            self._payload, self._data = body, None
        return self

    def versioned_params(self, params: Mapping[str, Any], codec: ParameterCodec) -> "Request":
        self._params.extend(codec(params))
        return self

    def timeout(self, timeout: Optional[float]) -> "Request":
        if timeout is not None:
            self._timeout = aiohttp.ClientTimeout(
                total=timeout,
                sock_connect=self._settings.networking.connect_timeout,
            )
        return self

    async def do(self) -> "Result":
        """
        Execute the request and read the response.

        The errors are escalated as they are raised by the transport:
        the request is never retried here. A cancellation of the awaiting task
        aborts the in-flight request.
        """
        url = self.url
        self._logger.debug(f"Requesting {self.verb} {url}", extra=self._make_extra())
        response = await api.request(
            method=self._method,
            url=url,
            payload=self._payload,
            data=self._data,
            headers=self._headers or None,
            timeout=self._timeout,
            context=self._context,
            settings=self._settings,
            logger=self._logger,
        )
        async with response:
            text = await response.text()
        return Result(text=text, verb=self.verb, url=url)

    def _make_extra(self) -> Dict[str, Any]:
        # Only the requests to the specific objects are attributed to them in the logs.
        if self._name is None or self._resource is None:
            return {}
        ref = dict(apiVersion=self._resource.api_version, kind=self._resource.kind,
                   name=self._name, namespace=self._namespace)
        return dict(k8s_ref={key: val for key, val in ref.items() if val is not None})


class Result:
    """
    A response of the API server, ready to be decoded into an object.

    The response is parsed only when it is needed: e.g. the deletions
    only check for errors, so they do not care what is in the response.
    """

    def __init__(self, *, text: str, verb: str, url: str) -> None:
        super().__init__()
        self.text = text
        self.verb = verb
        self.url = url

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}: {self.verb} {self.url}>'

    @property
    def payload(self) -> Any:
        try:
            return json.loads(self.text) if self.text else None
        except json.JSONDecodeError as e:
            raise errors.DecodeError(f"The response to {self.verb} {self.url} is not JSON.") from e

    def into(self, obj: MutableMapping[str, Any], *, kind: Optional[str] = None) -> None:
        """
        Decode the response into the object, replacing its content in place.

        The expected kind (by default, the object's own kind) defines the shape:
        a list of items for the lists, a single object of that kind otherwise.
        The object is not modified if the response does not match the shape.
        """
        payload = self.payload
        if not isinstance(payload, Mapping):
            raise errors.DecodeError(f"The response to {self.verb} {self.url} is not an object, "
                                     f"but {type(payload).__name__}.")

        expected_kind = kind or obj.get('kind')
        actual_kind = payload.get('kind')
        if expected_kind and actual_kind and expected_kind != actual_kind:
            raise errors.DecodeError(f"The response to {self.verb} {self.url} is {actual_kind!r}, "
                                     f"while {expected_kind!r} is expected.")

        is_list = isinstance(obj, bodies.ObjectList) or (expected_kind or '').endswith('List')
        if is_list and not isinstance(payload.get('items'), list):
            raise errors.DecodeError(f"The response to {self.verb} {self.url} has no items, "
                                     f"while a list is expected.")

        bodies.replace_content(obj, payload)
