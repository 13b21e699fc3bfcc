"""
Shared fixtures.
"""
import os
import shutil
import tempfile

import pytest

from todocore.storage import InMemoryGateway, SQLiteGateway


@pytest.fixture
def temp_db_path():
    """Path to a SQLite file in a temporary directory."""
    temp_dir = tempfile.mkdtemp()
    yield os.path.join(temp_dir, "test.db")
    shutil.rmtree(temp_dir)


@pytest.fixture
def sqlite_gateway(temp_db_path):
    """Initialized SQLite gateway on a temporary file."""
    gateway = SQLiteGateway(temp_db_path)
    gateway.initialize()
    yield gateway
    gateway.close()


@pytest.fixture
def memory_gateway():
    """Initialized in-memory gateway."""
    gateway = InMemoryGateway()
    gateway.initialize()
    yield gateway
    gateway.close()


@pytest.fixture(params=["sqlite", "memory"])
def gateway(request):
    """Every gateway that runs without external services."""
    return request.getfixturevalue(f"{request.param}_gateway")
