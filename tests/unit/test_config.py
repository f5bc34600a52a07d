import logging

import pytest

from caspystore.utils import config as config_module
from caspystore.utils.config import get_config
from caspystore.utils.logging import get_logger, setup_logging


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("CASPY_HOSTS", "CASPY_PORT", "CASPY_KEYSPACE", "CASPY_MAPPINGS_PATH", "CASPY_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)


def test_defaults(tmp_path):
    config = get_config(str(tmp_path))
    assert config == config_module.default_config()


def test_reads_caspy_toml(tmp_path):
    (tmp_path / "caspy.toml").write_text(
        '[cassandra]\nhosts = ["10.0.0.1", "10.0.0.2"]\nport = 9142\nkeyspace = "shop"\n'
        '[store]\nmapping_paths = ["mappings"]\nlog_level = "debug"\n',
        encoding="utf-8",
    )
    config = get_config(str(tmp_path))
    assert config["hosts"] == ["10.0.0.1", "10.0.0.2"]
    assert config["port"] == 9142
    assert config["keyspace"] == "shop"
    assert config["mapping_paths"] == ["mappings"]
    assert config["log_level"] == "DEBUG"


def test_env_overrides_file(tmp_path, monkeypatch):
    (tmp_path / "caspy.toml").write_text('[cassandra]\nkeyspace = "shop"\nport = 9142\n', encoding="utf-8")
    monkeypatch.setenv("CASPY_KEYSPACE", "from_env")
    monkeypatch.setenv("CASPY_HOSTS", "h1, h2")
    monkeypatch.setenv("CASPY_PORT", "9999")
    monkeypatch.setenv("CASPY_MAPPINGS_PATH", "a,b")

    config = get_config(str(tmp_path))

    assert config["keyspace"] == "from_env"
    assert config["hosts"] == ["h1", "h2"]
    assert config["port"] == 9999
    assert config["mapping_paths"] == ["a", "b"]


def test_invalid_port_keeps_previous(tmp_path, monkeypatch, caplog):
    monkeypatch.setenv("CASPY_PORT", "not-a-port")
    with caplog.at_level(logging.WARNING, logger="caspystore"):
        config = get_config(str(tmp_path))
    assert config["port"] == 9042
    assert "CASPY_PORT inválido" in caplog.text


def test_broken_toml_is_reported(tmp_path, caplog):
    (tmp_path / "caspy.toml").write_text("[cassandra\n", encoding="utf-8")
    with caplog.at_level(logging.WARNING, logger="caspystore"):
        config = get_config(str(tmp_path))
    assert config["keyspace"] == "caspystore_demo"
    assert "Erro ao ler caspy.toml" in caplog.text


def test_setup_logging_levels(monkeypatch):
    logger = setup_logging("debug")
    assert logger.name == "caspystore"
    assert logger.level == logging.DEBUG

    monkeypatch.setenv("CASPY_LOG_LEVEL", "ERROR")
    assert setup_logging().level == logging.ERROR

    assert setup_logging("nonsense").level == logging.WARNING


def test_setup_logging_installs_single_handler():
    setup_logging("INFO")
    count = len(logging.getLogger("caspystore").handlers)
    setup_logging("INFO")
    assert len(logging.getLogger("caspystore").handlers) == count


def test_get_logger_namespacing():
    assert get_logger("cli").name == "caspystore.cli"
    assert get_logger("caspystore.core.store").name == "caspystore.core.store"
