import dataclasses
import http.client
import inspect
import json
import logging
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

import aiohttp
import pytest
import yarl
from aioresponses import CallbackResult, aioresponses

from typedkube._cogs.clients.auth import APIContext
from typedkube._cogs.clients.generic import Client
from typedkube._cogs.clients.mapping import StaticRESTMapper
from typedkube._cogs.configs.configuration import ClientSettings
from typedkube._cogs.structs.bodies import Object, ObjectList
from typedkube._cogs.structs.credentials import ConnectionInfo
from typedkube._cogs.structs.references import Resource
from typedkube._cogs.structs.schemes import make_default_scheme


class TypedExample(Object):
    pass


class TypedExampleList(ObjectList):
    pass


@pytest.fixture(params=[True, False], ids=['namespaced', 'cluster'])
def resource(request):
    """ The custom resource used in the tests: both scopes, unless overridden. """
    return Resource('typedkube.dev', 'v1', 'typedexamples', kind='TypedExample',
                    namespaced=request.param, subresources=frozenset({'status'}))


@pytest.fixture()
def namespaced_resource():
    return Resource('typedkube.dev', 'v1', 'typedexamples', kind='TypedExample', namespaced=True)


@pytest.fixture()
def cluster_resource():
    return Resource('typedkube.dev', 'v1', 'typedexamples', kind='TypedExample', namespaced=False)


@pytest.fixture()
def namespace(resource):
    return 'ns' if resource.namespaced else None


@pytest.fixture()
def settings():
    return ClientSettings()


@pytest.fixture()
def logger():
    return logging.getLogger('typedkube.clients')


@pytest.fixture()
def scheme():
    scheme = make_default_scheme()
    scheme.add_known_types('typedkube.dev', 'v1', TypedExample, TypedExampleList)
    return scheme


@pytest.fixture()
def builtin_resources():
    return [
        Resource('', 'v1', 'pods', kind='Pod', namespaced=True),
        Resource('', 'v1', 'nodes', kind='Node', namespaced=False),
        Resource('', 'v1', 'configmaps', kind='ConfigMap', namespaced=True),
        Resource('apps', 'v1', 'deployments', kind='Deployment', namespaced=True),
    ]


@pytest.fixture()
def mapper(resource, builtin_resources):
    return StaticRESTMapper([resource] + builtin_resources)


#
# A fake API server: `aioresponses` intercepts the requests of all aiohttp sessions.
# No external calls must be made under any circumstances: unmatched requests fail
# with a connection error, so every test declares all the responses it expects.
#

@pytest.fixture()
def hostname():
    """ A fake hostname to be used in all aiohttp/aioresponses tests. """
    return 'fake-host'


@pytest.fixture()
def responses():
    with aioresponses() as mocked:
        yield mocked


@dataclasses.dataclass(frozen=True)
class FakeRequest:
    method: str
    path: str
    query: List[Tuple[str, str]]
    headers: Mapping[str, str]
    data: Any
    timeout: Optional[aiohttp.ClientTimeout]


ResponseBody = Union[None, str, bytes, Mapping[str, Any], Callable[[FakeRequest], Any]]  # or awaitable


class FakeAPI:
    """
    The K8s-style routes by method & path (with any query) for `aioresponses`.

    Every route serves its response repeatedly unless ``repeat`` limits it;
    the routes of the same method & path are matched in the order of addition.
    An ``exception`` is raised on the client side instead of responding.
    The matched requests are recorded in the order of arrival for assertions.
    """

    def __init__(self, responses: aioresponses, server: str) -> None:
        super().__init__()
        self.server = server
        self.requests: List[FakeRequest] = []
        self._responses = responses

    def status(self, code: int, reason: str, message: str = 'boo!') -> Dict[str, Any]:
        return {'apiVersion': 'v1', 'kind': 'Status', 'status': 'Failure',
                'code': code, 'reason': reason, 'message': message}

    def add(
            self,
            method: str,
            path: str,
            body: ResponseBody = None,
            *,
            status: int = 200,
            repeat: Union[bool, int] = True,
            exception: Optional[Exception] = None,
    ) -> None:
        async def respond(url: yarl.URL, **kwargs: Any) -> CallbackResult:
            request = self._record(method, url, kwargs)
            result = body(request) if callable(body) else body
            if inspect.isawaitable(result):
                result = await result
            reason = http.client.responses.get(status, '')  # never None for raise_for_status()
            if result is None:
                return CallbackResult(status=status, reason=reason)
            elif isinstance(result, (str, bytes)):
                return CallbackResult(status=status, reason=reason, body=result)
            else:
                return CallbackResult(status=status, reason=reason, payload=result)

        url = re.compile(re.escape(self.server + path) + r'(\?.*)?$')
        self._responses.add(url, method=method.upper(), callback=respond, repeat=repeat,
                            exception=exception)

    def _record(self, method: str, url: yarl.URL, kwargs: Mapping[str, Any]) -> FakeRequest:
        data = kwargs.get('json')
        if data is None and kwargs.get('data') is not None:
            try:
                data = json.loads(kwargs['data'])
            except ValueError:
                data = kwargs['data']
        request = FakeRequest(
            method=method.upper(),
            path=url.path,
            query=list(kwargs.get('params') or url.query.items()),
            headers=dict(kwargs.get('headers') or {}),
            data=data,
            timeout=kwargs.get('timeout'),
        )
        self.requests.append(request)
        return request


@pytest.fixture()
def fake_api(responses, hostname):
    return FakeAPI(responses, server=f'https://{hostname}')


@pytest.fixture()
async def context(fake_api):
    async with APIContext(ConnectionInfo(server=fake_api.server)) as context:
        yield context


@pytest.fixture()
def client(context, scheme, mapper, settings, logger):
    return Client(context=context, scheme=scheme, mapper=mapper, settings=settings, logger=logger)


@pytest.fixture()
def echo():
    """ A server-side response which returns the request's body, optionally updated. """
    def factory(*, metadata: Optional[Mapping[str, Any]] = None, **fields: Any):
        def respond(request: FakeRequest) -> Dict[str, Any]:
            body = dict(request.data or {})
            body.update(fields)
            body['metadata'] = {**body.get('metadata', {}), **(metadata or {})}
            return body
        return respond
    return factory
