import pytest

from typedkube._cogs.structs.references import GroupVersionKind, Resource


def test_creation_with_no_args():
    with pytest.raises(TypeError):
        Resource()


def test_creation_with_all_kwargs():
    resource = Resource(
        group='group',
        version='version',
        plural='plural',
        kind='kind',
        singular='singular',
        shortcuts=frozenset({'shortcut1', 'shortcut2'}),
        subresources=frozenset({'sub1', 'sub2'}),
        namespaced=False,
        verbs=frozenset({'verb1', 'verb2'}),
    )
    assert resource.group == 'group'
    assert resource.version == 'version'
    assert resource.plural == 'plural'
    assert resource.kind == 'kind'
    assert resource.singular == 'singular'
    assert resource.shortcuts == {'shortcut1', 'shortcut2'}
    assert resource.subresources == {'sub1', 'sub2'}
    assert resource.namespaced == False
    assert resource.verbs == {'verb1', 'verb2'}


def test_defaults():
    resource = Resource('group', 'version', 'plural')
    assert resource.kind is None
    assert resource.namespaced is True
    assert resource.subresources == frozenset()


def test_equality_by_group_version_plural_only():
    resource1 = Resource('group', 'version', 'plural', kind='Kind1', namespaced=True)
    resource2 = Resource('group', 'version', 'plural', kind='Kind2', namespaced=False)
    assert resource1 == resource2
    assert hash(resource1) == hash(resource2)
    assert resource1 != Resource('group', 'version', 'other')


def test_immutability():
    resource = Resource('group', 'version', 'plural')
    with pytest.raises(AttributeError):
        resource.plural = 'other'  # type: ignore


@pytest.mark.parametrize('group, version, expected', [
    ('', 'v1', 'v1'),
    ('apps', 'v1', 'apps/v1'),
    ('typedkube.dev', 'v1beta1', 'typedkube.dev/v1beta1'),
])
def test_api_version(group, version, expected):
    resource = Resource(group, version, 'plural')
    assert resource.api_version == expected


def test_gvk_from_the_kind():
    resource = Resource('apps', 'v1', 'deployments', kind='Deployment')
    assert resource.gvk == GroupVersionKind('apps', 'v1', 'Deployment')


def test_repr_with_group():
    assert repr(Resource('apps', 'v1', 'deployments')) == 'deployments.v1.apps'


def test_repr_without_group():
    assert repr(Resource('', 'v1', 'pods')) == 'pods.v1'


def test_url_for_a_list_of_core_resources_clusterwide():
    resource = Resource('', 'v1', 'pods')
    url = resource.get_url(namespace=None)
    assert url == '/api/v1/pods'


def test_url_for_a_list_of_core_resources_in_a_namespace():
    resource = Resource('', 'v1', 'pods')
    url = resource.get_url(namespace='ns-a.b')
    assert url == '/api/v1/namespaces/ns-a.b/pods'


def test_url_for_a_specific_core_resource_in_a_namespace():
    resource = Resource('', 'v1', 'pods')
    url = resource.get_url(namespace='ns-a.b', name='name-a.b')
    assert url == '/api/v1/namespaces/ns-a.b/pods/name-a.b'


def test_url_for_a_list_of_custom_resources_clusterwide():
    resource = Resource('group', 'version', 'plural')
    url = resource.get_url(namespace=None)
    assert url == '/apis/group/version/plural'


def test_url_for_a_list_of_custom_resources_in_a_namespace():
    resource = Resource('group', 'version', 'plural')
    url = resource.get_url(namespace='ns-a.b')
    assert url == '/apis/group/version/namespaces/ns-a.b/plural'


def test_url_for_a_specific_custom_resource_clusterwide():
    resource = Resource('group', 'version', 'plural', namespaced=False)
    url = resource.get_url(namespace=None, name='name-a.b')
    assert url == '/apis/group/version/plural/name-a.b'


def test_url_for_a_specific_custom_resource_in_a_namespace():
    resource = Resource('group', 'version', 'plural')
    url = resource.get_url(namespace='ns-a.b', name='name-a.b')
    assert url == '/apis/group/version/namespaces/ns-a.b/plural/name-a.b'


def test_url_for_a_subresource():
    resource = Resource('group', 'version', 'plural')
    url = resource.get_url(namespace='ns', name='name', subresource='status')
    assert url == '/apis/group/version/namespaces/ns/plural/name/status'


def test_url_for_a_subresource_without_a_name():
    resource = Resource('group', 'version', 'plural')
    with pytest.raises(ValueError) as err:
        resource.get_url(namespace='ns', subresource='status')
    assert str(err.value) == "Subresources can be used only with specific resources by names."


def test_url_with_params_as_a_mapping():
    resource = Resource('group', 'version', 'plural')
    url = resource.get_url(params={'limit': '10', 'labelSelector': 'a=b'})
    assert url == '/apis/group/version/plural?limit=10&labelSelector=a%3Db'


def test_url_with_params_as_repeated_pairs():
    resource = Resource('group', 'version', 'plural')
    url = resource.get_url(params=[('dryRun', 'All'), ('dryRun', 'Other')])
    assert url == '/apis/group/version/plural?dryRun=All&dryRun=Other'


def test_url_with_empty_params():
    resource = Resource('group', 'version', 'plural')
    url = resource.get_url(params=[])
    assert url == '/apis/group/version/plural'


@pytest.mark.parametrize('server', ['https://localhost', 'https://localhost/'])
def test_url_with_a_server(server):
    resource = Resource('', 'v1', 'pods')
    url = resource.get_url(server=server, namespace='ns', name='name')
    assert url == 'https://localhost/api/v1/namespaces/ns/pods/name'
