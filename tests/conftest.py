import pytest

from verilist.config import configure, reset_config


@pytest.fixture(autouse=True)
def full_contracts(monkeypatch):
    """Every test runs with all contracts checked unless it switches mode itself."""
    monkeypatch.delenv("VERILIST_CONTRACTS", raising=False)
    configure(mode="all", log_violations=True)
    yield
    reset_config()
