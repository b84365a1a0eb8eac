"""verilist Configuration Tests — CONF-001 through CONF-004."""

import json

import pytest

from verilist.config import (
    ContractConfig, configure, contract_mode, find_config, get_config, load_config,
)


class TestCONF001:
    """CONF-001: Defaults."""

    def test_default_mode(self):
        config = ContractConfig()
        assert config.mode == "requires"
        assert config.check_requires and not config.check_ensures
        assert config.log_violations

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            ContractConfig(mode="sometimes")

    def test_no_file_gives_defaults(self, tmp_path):
        assert load_config(start_dir=str(tmp_path)).mode == "requires"


class TestCONF002:
    """CONF-002: Config files."""

    def test_found_walking_up(self, tmp_path):
        (tmp_path / ".verilistrc.json").write_text(json.dumps({"mode": "all", "log_violations": False}))
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config(str(nested)) == str(tmp_path / ".verilistrc.json")
        config = load_config(start_dir=str(nested))
        assert config.mode == "all"
        assert not config.log_violations

    def test_malformed_file_gives_defaults(self, tmp_path):
        path = tmp_path / "verilist.config.json"
        path.write_text("{not json")
        assert load_config(str(path)).mode == "requires"

    def test_invalid_mode_in_file(self, tmp_path):
        path = tmp_path / ".verilistrc.json"
        path.write_text(json.dumps({"mode": "never"}))
        with pytest.raises(ValueError):
            load_config(str(path))


class TestCONF003:
    """CONF-003: Environment overrides the file."""

    def test_env(self, tmp_path, monkeypatch):
        path = tmp_path / ".verilistrc.json"
        path.write_text(json.dumps({"mode": "all"}))
        monkeypatch.setenv("VERILIST_CONTRACTS", "OFF")
        assert load_config(str(path)).mode == "off"


class TestCONF004:
    """CONF-004: Programmatic overrides."""

    def test_configure(self):
        configure(mode="off")
        assert get_config().mode == "off"

    def test_contract_mode_restores(self):
        configure(mode="requires")
        with contract_mode("all") as config:
            assert config.mode == "all"
            assert get_config().check_ensures
        assert get_config().mode == "requires"

    def test_contract_mode_rejects_unknown(self):
        with pytest.raises(ValueError):
            with contract_mode("maybe"):
                pass
        assert get_config().mode == "all"
