import base64
import os
import ssl

import pytest

from typedkube._cogs.clients.auth import APIContext
from typedkube._cogs.structs.credentials import ConnectionInfo, ConnectionInfoError


async def test_server_and_namespace():
    info = ConnectionInfo(server='https://localhost', default_namespace='ns1')
    async with APIContext(info) as context:
        assert context.server == 'https://localhost'
        assert context.default_namespace == 'ns1'
        assert not context.session.closed
    assert context.session.closed


async def test_bearer_token():
    info = ConnectionInfo(server='https://localhost', token='token1')
    async with APIContext(info) as context:
        assert context.session.headers['Authorization'] == 'Bearer token1'


async def test_scheme_with_token():
    info = ConnectionInfo(server='https://localhost', scheme='Digest', token='token1')
    async with APIContext(info) as context:
        assert context.session.headers['Authorization'] == 'Digest token1'


async def test_no_authorization():
    info = ConnectionInfo(server='https://localhost')
    async with APIContext(info) as context:
        assert 'Authorization' not in context.session.headers
        assert context.session.headers['User-Agent'].startswith('typedkube/')


async def test_basic_auth():
    info = ConnectionInfo(server='https://localhost', username='user', password='pass')
    async with APIContext(info) as context:
        assert context.session.auth is not None
        assert context.session.auth.login == 'user'
        assert context.session.auth.password == 'pass'


async def test_insecure_ssl():
    info = ConnectionInfo(server='https://localhost', insecure=True)
    async with APIContext(info) as context:
        sslcontext = context.session.connector._ssl
        assert isinstance(sslcontext, ssl.SSLContext)
        assert sslcontext.verify_mode == ssl.CERT_NONE
        assert sslcontext.check_hostname is False


@pytest.mark.parametrize('kwargs', [
    dict(ca_path='/tmp/ca.pem', ca_data=b'xxx'),
    dict(certificate_path='/tmp/cert.pem', certificate_data=b'xxx'),
    dict(private_key_path='/tmp/pkey.pem', private_key_data=b'xxx'),
], ids=['ca', 'certificate', 'private-key'])
async def test_conflicting_paths_and_data(kwargs):
    info = ConnectionInfo(server='https://localhost', **kwargs)
    with pytest.raises(ConnectionInfoError, match=r"Need only one"):
        APIContext(info)


async def test_data_goes_to_temporary_files_which_are_purged(mocker):
    load_verify_locations = mocker.patch.object(ssl.SSLContext, 'load_verify_locations')
    data = base64.b64encode(b'fake-ca-data')
    info = ConnectionInfo(server='https://localhost', ca_data=data)
    context = APIContext(info)
    path, = context._tempfiles._paths.values()
    assert os.path.exists(path)
    with open(path, 'rb') as f:
        assert f.read() == b'fake-ca-data'
    assert load_verify_locations.called

    await context.close()
    assert not os.path.exists(path)
