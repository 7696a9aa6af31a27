# -*- coding: utf-8 -*-

import logging

import pytest

from sqlstep import Database
from sqlstep.database.core import logger


logger.setLevel(logging.DEBUG)


@pytest.fixture(autouse=True)
def config_home(tmp_path, monkeypatch):
    """Keeps config files of all tests in a temporary directory."""
    config_home = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.setattr("sqlstep.config.main._config_instances", {})
    yield config_home


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "test.sqlite"


@pytest.fixture
def db(db_path):
    database = Database(db_path)
    yield database
    database.close()


@pytest.fixture
def table(db):
    db.execute("CREATE TABLE test (id INTEGER PRIMARY KEY, value);")
    yield db
