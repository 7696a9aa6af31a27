import configparser as cp
import logging
import os.path as osp

import pytest
from packaging.version import Version

from sqlstep.config import SqlStepConfig, validate_config_name
from sqlstep.config.main import CONF_VERSION, DEFAULTS_CONFIG, KEY_SECTION_MAP
from sqlstep.config.user import UserConfig
from sqlstep.logging import LOG_FMT_LONG, LOG_FMT_SHORT, setup_logging


TEST_DEFAULTS = {
    "engine": {
        "library": "",
    },
    "app": {
        "log_level": 20,
        "ratio": 0.5,
    },
}


@pytest.fixture
def config(tmp_path):
    config_path = tmp_path / "test-config.ini"
    yield UserConfig(str(config_path), defaults=TEST_DEFAULTS, version=Version("1.0"))


def test_config_creation(config):
    for section_name, section in TEST_DEFAULTS.items():
        for option, value in section.items():
            assert config.get(section_name, option) == value

    assert config.get_version() == Version("1.0")

    # loading never writes to the drive
    assert not osp.exists(config.config_path)


def test_get_failures(config):
    with pytest.raises(cp.NoOptionError):
        config.get("main", "invalid_option")

    with pytest.raises(cp.NoSectionError):
        config.get("invalid_section", "invalid_option")

    assert config.get("main", "invalid_option", "default") == "default"
    assert config.get("invalid_section", "invalid_option", "default") == "default"


def test_set_option(config):
    config.set("engine", "library", "/usr/lib/libsqlite3.so")
    config.set("app", "log_level", 10)
    config.set("app", "ratio", 1)
    config.set("new_section", "new_option", ["a", "b"])

    assert config.get("engine", "library") == "/usr/lib/libsqlite3.so"
    assert config.get("app", "log_level") == 10
    assert config.get("app", "ratio") == 1.0
    assert config.get("new_section", "new_option") == ["a", "b"]

    with pytest.raises(ValueError):
        config.set("app", "log_level", "DEBUG")

    with pytest.raises(ValueError):
        config.set("engine", "library", 1234)


def test_save_and_load(config):
    config.set("app", "log_level", 30)

    assert osp.exists(config.config_path)

    loaded = UserConfig(config.config_path, defaults=TEST_DEFAULTS)
    assert loaded.get("app", "log_level") == 30

    ignored = UserConfig(config.config_path, defaults=TEST_DEFAULTS, load=False)
    assert ignored.get("app", "log_level") == 20


def test_set_without_save(config):
    config.set("app", "log_level", 30, save=False)

    assert config.get("app", "log_level") == 30
    assert not osp.exists(config.config_path)


def test_reset_to_defaults(config):
    config.set("engine", "library", "/usr/lib/libsqlite3.so")
    config.set("app", "log_level", 30)

    config.reset_to_defaults("app")

    assert config.get("engine", "library") == "/usr/lib/libsqlite3.so"
    assert config.get("app", "log_level") == 20

    config.reset_to_defaults()

    assert config.get("engine", "library") == ""


def test_missing_section_header(tmp_path, caplog):
    config_path = tmp_path / "broken.ini"
    config_path.write_text("library = /usr/lib/libsqlite3.so\n")

    with caplog.at_level(logging.ERROR):
        conf = UserConfig(str(config_path), defaults=TEST_DEFAULTS)

    assert "contains no section headers" in caplog.text
    assert conf.get("engine", "library") == ""


def test_shared_config(config_home):
    conf = SqlStepConfig("test-config")

    assert conf is SqlStepConfig("test-config")
    assert conf is not SqlStepConfig()
    assert conf.get_version() == CONF_VERSION
    assert conf.config_path.endswith(osp.join("sqlstep", "test-config.ini"))

    for section_name, section in DEFAULTS_CONFIG.items():
        for option, value in section.items():
            assert conf.get(section_name, option) == value
            assert KEY_SECTION_MAP[option] == section_name


def test_validate_config_name():
    assert validate_config_name("test-config") == "test-config"

    with pytest.raises(ValueError):
        validate_config_name("test config")


@pytest.fixture
def sqlstep_logger():
    logger = logging.getLogger("sqlstep")
    level = logger.level
    yield logger
    logger.setLevel(level)


def test_setup_logging(sqlstep_logger):
    handlers = setup_logging("test-config", level=logging.DEBUG)

    try:
        assert len(handlers) == 1
        assert handlers[0] in sqlstep_logger.handlers
        assert handlers[0].formatter is LOG_FMT_LONG
        assert sqlstep_logger.level == logging.DEBUG
    finally:
        for handler in handlers:
            sqlstep_logger.removeHandler(handler)


def test_setup_logging_from_config(sqlstep_logger):
    SqlStepConfig("test-config").set("app", "log_level", logging.WARNING)

    handlers = setup_logging("test-config")

    try:
        assert handlers[0].formatter is LOG_FMT_SHORT
        assert sqlstep_logger.level == logging.WARNING
    finally:
        for handler in handlers:
            sqlstep_logger.removeHandler(handler)

    assert setup_logging("test-config", stderr=False) == []


def test_setup_logging_replaces_handlers(sqlstep_logger):
    first = setup_logging("test-config", level=logging.INFO)
    second = setup_logging("test-config", level=logging.DEBUG)

    try:
        assert first[0] not in sqlstep_logger.handlers
        assert second[0] in sqlstep_logger.handlers
        assert len(sqlstep_logger.handlers) == 1
    finally:
        setup_logging("test-config", stderr=False)

    assert sqlstep_logger.handlers == []
