"""
Leitura de configuração: defaults, caspy.toml e variáveis de ambiente (nesta ordem).
"""

import logging
import os
import tomllib
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "caspy.toml"


def default_config() -> Dict[str, Any]:
    return {
        "hosts": ["127.0.0.1"],
        "keyspace": "caspystore_demo",
        "port": 9042,
        "mapping_paths": [],  # Diretórios com arquivos de mapeamento .toml
        "log_level": "WARNING",
    }


def get_config(config_dir: Optional[str] = None) -> Dict[str, Any]:
    """Obtém configuração lendo de caspy.toml, variáveis de ambiente e defaults."""
    config = default_config()

    # 1. Ler de caspy.toml
    config_file_path = os.path.join(config_dir or os.getcwd(), CONFIG_FILE_NAME)
    if os.path.exists(config_file_path):
        try:
            with open(config_file_path, "rb") as f:
                toml_config = tomllib.load(f)

            if "cassandra" in toml_config:
                cassandra_config = toml_config["cassandra"]
                if "hosts" in cassandra_config:
                    config["hosts"] = list(cassandra_config["hosts"])
                if "port" in cassandra_config:
                    config["port"] = int(cassandra_config["port"])
                if "keyspace" in cassandra_config:
                    config["keyspace"] = cassandra_config["keyspace"]

            if "store" in toml_config:
                store_config = toml_config["store"]
                if "mapping_paths" in store_config:
                    config["mapping_paths"] = list(store_config["mapping_paths"])
                if "log_level" in store_config:
                    config["log_level"] = str(store_config["log_level"]).upper()

        except (OSError, tomllib.TOMLDecodeError, TypeError, ValueError) as e:
            logger.warning(f"Erro ao ler {CONFIG_FILE_NAME}: {e}")

    # 2. Sobrescrever com variáveis de ambiente
    caspy_hosts = os.getenv("CASPY_HOSTS")
    if caspy_hosts:
        config["hosts"] = [h.strip() for h in caspy_hosts.split(",") if h.strip()]
    caspy_keyspace = os.getenv("CASPY_KEYSPACE")
    if caspy_keyspace:
        config["keyspace"] = caspy_keyspace
    caspy_port = os.getenv("CASPY_PORT")
    if caspy_port:
        try:
            config["port"] = int(caspy_port)
        except ValueError:
            logger.warning(f"CASPY_PORT inválido: {caspy_port}. Usando {config['port']}.")

    caspy_mappings_path = os.getenv("CASPY_MAPPINGS_PATH")
    if caspy_mappings_path:
        config["mapping_paths"].extend(p for p in caspy_mappings_path.split(",") if p)

    caspy_log_level = os.getenv("CASPY_LOG_LEVEL")
    if caspy_log_level:
        config["log_level"] = caspy_log_level.upper()

    return config
