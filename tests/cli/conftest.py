import functools
import logging

import click.testing
import pytest

from typedkube._cogs.clients.generic import Client
from typedkube._cogs.clients.mapping import StaticRESTMapper
from typedkube._cogs.clients.resolving import MetadataCache, Resolver
from typedkube._cogs.helpers.loggers import ObjectFormatter
from typedkube.cli import CLIControls, main


@pytest.fixture(autouse=True)
def _clear_own_handlers():
    logger = logging.getLogger()
    original_handlers = logger.handlers[:]
    original_level = logger.level
    yield
    logger.handlers[:] = [
        handler for handler in original_handlers
        if not isinstance(handler.formatter, ObjectFormatter)
    ]
    logger.setLevel(original_level)


@pytest.fixture(autouse=True)
def _no_envvars(monkeypatch):
    monkeypatch.delenv('TYPEDKUBE_SERVER', raising=False)
    monkeypatch.delenv('TYPEDKUBE_TOKEN', raising=False)


@pytest.fixture()
def mapper(namespaced_resource, builtin_resources):
    return StaticRESTMapper([namespaced_resource] + builtin_resources)


@pytest.fixture()
def fake_client(mocker, scheme, mapper):
    """ A client that never talks to the API: only records the calls. """
    client = mocker.Mock(spec=Client)
    client.scheme = scheme
    client.cache = MetadataCache(Resolver(scheme=scheme, mapper=mapper))
    return client


@pytest.fixture()
def controls(fake_client, scheme):
    return CLIControls(scheme=scheme, client_factory=lambda context: fake_client)


@pytest.fixture()
def runner():
    runner = click.testing.CliRunner()
    return runner


@pytest.fixture()
def invoke(runner, controls):
    return functools.partial(runner.invoke, main, obj=controls)


@pytest.fixture()
def connect():
    """ The minimal connection options, for brevity. No real connection is made. """
    return ['--server', 'https://fake-host']
