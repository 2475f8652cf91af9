"""
Tests for configuration loading.
"""

import logging

import pytest
import yaml

from rde_import.config import ImportConfig, create_sample_config, setup_logging


class TestImportConfig:
    """Tests for ImportConfig."""

    def test_defaults(self):
        """Empty config uses defaults."""
        config = ImportConfig.from_dict({})

        assert config.oracle is None
        assert config.imports.concurrency == 8
        assert config.imports.registry_suffix == "ARI"

    def test_from_dict(self):
        """All sections are read."""
        config = ImportConfig.from_dict({
            "oracle": {"user": "rde", "dsn": "db:1521/REG", "pool_max": 20},
            "import": {"concurrency": 4, "registry_suffix": "AE"},
            "logging_config": "/etc/rde-import/logging.yaml",
        })

        assert config.oracle.user == "rde"
        assert config.oracle.dsn == "db:1521/REG"
        assert config.oracle.pool_min == 2
        assert config.oracle.pool_max == 20
        assert config.imports.concurrency == 4
        assert config.imports.registry_suffix == "AE"
        assert config.logging_config == "/etc/rde-import/logging.yaml"

    def test_empty_sections(self, tmp_path):
        """Bare section keys fall back to defaults."""
        path = tmp_path / "config.yaml"
        path.write_text("oracle:\nimport:\n")

        config = ImportConfig.from_file(path)
        assert config.oracle is None
        assert config.imports.concurrency == 8
        assert config.imports.registry_suffix == "ARI"

    def test_oracle_requires_dsn(self):
        """An oracle section needs user and dsn."""
        with pytest.raises(ValueError, match="dsn"):
            ImportConfig.from_dict({"oracle": {"user": "rde"}})

    def test_invalid_concurrency(self):
        """Concurrency must be positive."""
        with pytest.raises(ValueError, match="concurrency"):
            ImportConfig.from_dict({"import": {"concurrency": 0}})

    def test_oracle_dict(self):
        """Oracle section converts to create_pool() arguments."""
        config = ImportConfig.from_dict({"oracle": {"user": "rde", "dsn": "db/REG"}})
        assert config.oracle_dict() == {
            "user": "rde",
            "dsn": "db/REG",
            "pool_min": 2,
            "pool_max": 10,
            "pool_increment": 1,
        }

    def test_oracle_dict_without_section(self):
        """No oracle section is an error when one is needed."""
        with pytest.raises(ValueError):
            ImportConfig().oracle_dict()

    def test_sample_config_loads(self, tmp_path):
        """The sample config is valid."""
        path = tmp_path / "config.yaml"
        path.write_text(create_sample_config())

        config = ImportConfig.from_file(path)
        assert config.oracle.user == "rde_import"
        assert config.imports.concurrency == 8

    def test_find_and_load_env(self, tmp_path, monkeypatch):
        """RDE_IMPORT_CONFIG points at the config file."""
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"import": {"concurrency": 3}}))
        monkeypatch.setenv("RDE_IMPORT_CONFIG", str(path))

        assert ImportConfig.find_and_load().imports.concurrency == 3

    def test_find_and_load_explicit_path(self, tmp_path, monkeypatch):
        """An explicit path wins over the environment."""
        explicit = tmp_path / "explicit.yaml"
        explicit.write_text(yaml.safe_dump({"import": {"concurrency": 5}}))
        monkeypatch.setenv("RDE_IMPORT_CONFIG", str(tmp_path / "missing.yaml"))

        assert ImportConfig.find_and_load(explicit).imports.concurrency == 5

    def test_find_and_load_nothing(self, tmp_path, monkeypatch):
        """Without any config file the defaults are used."""
        monkeypatch.delenv("RDE_IMPORT_CONFIG", raising=False)
        monkeypatch.chdir(tmp_path)

        config = ImportConfig.find_and_load()
        assert config.oracle is None
        assert config.imports.concurrency == 8


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_dict_config(self, tmp_path, monkeypatch):
        """A logging YAML file is applied."""
        monkeypatch.chdir(tmp_path)
        path = tmp_path / "logging.yaml"
        path.write_text(yaml.safe_dump({
            "version": 1,
            "disable_existing_loggers": False,
            "loggers": {"rde.test": {"level": "ERROR"}},
        }))

        setup_logging(ImportConfig(logging_config=str(path)))
        assert logging.getLogger("rde.test").level == logging.ERROR

    def test_level_override(self, tmp_path):
        """An explicit level is set on the rde logger."""
        setup_logging(ImportConfig(logging_config=str(tmp_path / "missing.yaml")), level=logging.DEBUG)
        assert logging.getLogger("rde").level == logging.DEBUG
