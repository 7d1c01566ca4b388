import pytest

from typedkube._cogs.structs.references import GroupVersionKind, ObjectKey


@pytest.mark.parametrize('api_version, kind, expected', [
    ('v1', 'Pod', GroupVersionKind('', 'v1', 'Pod')),
    ('apps/v1', 'Deployment', GroupVersionKind('apps', 'v1', 'Deployment')),
    ('typedkube.dev/v1beta1', 'TypedExample', GroupVersionKind('typedkube.dev', 'v1beta1', 'TypedExample')),
])
def test_gvk_parsing(api_version, kind, expected):
    gvk = GroupVersionKind.parse(api_version, kind)
    assert gvk == expected
    assert gvk.api_version == api_version


def test_gvk_is_hashable_and_comparable():
    gvk1 = GroupVersionKind('apps', 'v1', 'Deployment')
    gvk2 = GroupVersionKind('apps', 'v1', 'Deployment')
    assert gvk1 == gvk2
    assert len({gvk1, gvk2}) == 1


def test_gvk_differs_by_any_part():
    gvk = GroupVersionKind('apps', 'v1', 'Deployment')
    assert gvk != gvk._replace(group='other')
    assert gvk != gvk._replace(version='v2')
    assert gvk != gvk._replace(kind='DeploymentList')


def test_gvk_str():
    assert str(GroupVersionKind('', 'v1', 'Pod')) == 'v1, Kind=Pod'
    assert str(GroupVersionKind('apps', 'v1', 'Deployment')) == 'apps/v1, Kind=Deployment'


def test_key_with_namespace():
    key = ObjectKey(name='name1', namespace='ns1')
    assert key.name == 'name1'
    assert key.namespace == 'ns1'
    assert str(key) == 'ns1/name1'


def test_key_without_namespace():
    key = ObjectKey(name='name1')
    assert key.namespace is None
    assert str(key) == 'name1'


def test_key_from_a_namespaced_object():
    key = ObjectKey.from_object({'metadata': {'name': 'name1', 'namespace': 'ns1'}})
    assert key == ObjectKey(name='name1', namespace='ns1')


def test_key_from_a_clusterscoped_object():
    key = ObjectKey.from_object({'metadata': {'name': 'name1'}})
    assert key == ObjectKey(name='name1', namespace=None)


def test_key_from_an_object_without_metadata():
    key = ObjectKey.from_object({})
    assert key == ObjectKey(name='', namespace=None)
