import pytest
from fastapi.testclient import TestClient

from brifify.api.main import create_app
from tests.support.services import make_container


@pytest.fixture
def services(reasoning):
    return make_container(reasoning)


@pytest.fixture
def container(services):
    return services[0]


@pytest.fixture
def ledger(services):
    return services[1]


@pytest.fixture
def client(container):
    with TestClient(create_app(container)) as test_client:
        yield test_client
