import os
import pytest


@pytest.fixture(scope="session")
def hosts():
    return os.getenv("CRATEDB_HOSTS")


@pytest.fixture(scope="session")
def username():
    return os.getenv("CRATEDB_USER")


@pytest.fixture(scope="session")
def password():
    return os.getenv("CRATEDB_PASSWORD")


@pytest.fixture(scope="session", autouse=True)
def connection_details(hosts, username, password):
    return {
        "hosts": hosts,
        "username": username,
        "password": password,
    }
