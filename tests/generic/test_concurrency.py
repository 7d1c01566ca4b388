import asyncio

import pytest

from typedkube._cogs.clients.generic import Client
from typedkube._cogs.clients.mapping import StaticRESTMapper
from typedkube._cogs.clients.resolving import MetadataCache, Resolver
from typedkube._cogs.structs.options import in_namespace
from typedkube._cogs.structs.references import GroupVersionKind, ObjectKey
from typedkube._cogs.structs.schemes import Node, Pod, PodList

CORE_V1 = {'resources': [
    {'name': 'pods', 'kind': 'Pod', 'namespaced': True},
    {'name': 'nodes', 'kind': 'Node', 'namespaced': False},
]}


@pytest.fixture()
def discovering_client(context, scheme, settings, logger):
    return Client(context=context, scheme=scheme, settings=settings, logger=logger)


async def test_concurrent_operations_discover_the_kind_once(fake_api, discovering_client):
    fake_api.add('get', '/api', {'versions': ['v1']})
    fake_api.add('get', '/api/v1', CORE_V1)
    fake_api.add('get', '/api/v1/namespaces/ns1/pods/p1', {'metadata': {'name': 'p1'}})
    fake_api.add('get', '/api/v1/namespaces/ns1/pods', {'items': []})

    await asyncio.gather(
        *[discovering_client.get(ObjectKey(name='p1', namespace='ns1'), Pod()) for _ in range(5)],
        *[discovering_client.list(PodList(), in_namespace('ns1')) for _ in range(5)],
    )

    paths = [request.path for request in fake_api.requests]
    assert paths.count('/api') == 1
    assert paths.count('/api/v1') == 1
    assert len(paths) == 12
    assert GroupVersionKind('', 'v1', 'Pod') in discovering_client.cache


async def test_resolved_kinds_are_not_rediscovered(fake_api, discovering_client):
    fake_api.add('get', '/api', {'versions': ['v1']})
    fake_api.add('get', '/api/v1', CORE_V1)
    fake_api.add('get', '/api/v1/nodes/node1', {'metadata': {'name': 'node1'}})

    await discovering_client.get('node1', Node())
    await discovering_client.get('node1', Node())
    paths = [request.path for request in fake_api.requests]
    assert paths == ['/api', '/api/v1', '/api/v1/nodes/node1', '/api/v1/nodes/node1']


async def test_shared_caches_across_clients(fake_api, context, scheme, settings, builtin_resources):
    fake_api.add('get', '/api/v1/nodes/node1', {'metadata': {'name': 'node1'}})
    cache = MetadataCache(Resolver(scheme=scheme, mapper=StaticRESTMapper(builtin_resources)))
    client1 = Client(context=context, scheme=scheme, cache=cache, settings=settings)
    client2 = Client(context=context, scheme=scheme, cache=cache, settings=settings)
    await client1.get('node1', Node())
    assert GroupVersionKind('', 'v1', 'Node') in client2.cache
    assert client1.cache is client2.cache


def test_mapper_and_cache_are_mutually_exclusive(scheme, mapper, mocker):
    cache = MetadataCache(Resolver(scheme=scheme, mapper=mapper))
    with pytest.raises(ValueError, match=r"not both"):
        Client(context=mocker.Mock(), scheme=scheme, mapper=mapper, cache=cache)