import pytest

from typedkube._cogs.clients.errors import NoResourceMatchError, TypeNotRegisteredError
from typedkube._cogs.clients.mapping import StaticRESTMapper
from typedkube._cogs.clients.resolving import Resolver
from typedkube._cogs.structs.bodies import Object, ObjectList
from typedkube._cogs.structs.references import GroupVersionKind, Resource
from typedkube._cogs.structs.schemes import Pod, PodList


@pytest.fixture()
def resolver(scheme, mapper):
    return Resolver(scheme=scheme, mapper=mapper)


def test_identifying_registered_objects(resolver):
    assert resolver.identify(Pod()) == GroupVersionKind('', 'v1', 'Pod')


def test_identifying_registered_lists_as_their_items(resolver):
    assert resolver.identify(PodList()) == GroupVersionKind('', 'v1', 'Pod')


def test_identifying_unstructured_lists_as_their_items(resolver):
    objs = ObjectList(apiVersion='typedkube.dev/v1', kind='TypedExampleList')
    assert resolver.identify(objs) == GroupVersionKind('typedkube.dev', 'v1', 'TypedExample')


def test_identifying_single_objects_with_list_like_kinds(resolver):
    # Not a list by its shape: it is some other kind with an unfortunate name.
    obj = Object(apiVersion='typedkube.dev/v1', kind='PlayList')
    assert resolver.identify(obj) == GroupVersionKind('typedkube.dev', 'v1', 'PlayList')


def test_identifying_unregistered_objects(resolver):
    with pytest.raises(TypeNotRegisteredError):
        resolver.identify(Object())


async def test_resolving_known_kinds(resolver, resource):
    resolved = await resolver.resolve(resource.gvk)
    assert resolved == resource
    assert resolved.namespaced == resource.namespaced


async def test_resolving_unknown_kinds(scheme):
    resolver = Resolver(scheme=scheme, mapper=StaticRESTMapper())
    with pytest.raises(NoResourceMatchError):
        await resolver.resolve(GroupVersionKind('', 'v1', 'Pod'))


async def test_resolving_lists_and_items_to_the_same_resource(scheme):
    pods = Resource('', 'v1', 'pods', kind='Pod')
    resolver = Resolver(scheme=scheme, mapper=StaticRESTMapper([pods]))
    assert await resolver.resolve(resolver.identify(Pod())) == pods
    assert await resolver.resolve(resolver.identify(PodList())) == pods
