import pytest


@pytest.fixture(autouse=True)
def _prevent_retries_in_api_tests(settings):
    settings.networking.error_backoffs = []


@pytest.fixture()
def obj(scheme, resource):
    """ A typed object of the tested resource, as composed by a user. """
    cls = scheme.known_types()[resource.gvk]
    return cls(metadata={'name': 'n1', 'namespace': 'ns'}, spec={'field': 'value'})


@pytest.fixture()
def objs(scheme, resource):
    """ A typed list of the tested resource, as a target for listing. """
    cls = scheme.known_types()[resource.gvk._replace(kind=f'{resource.kind}List')]
    return cls()
