import pytest

from command_spool.spool import SpoolStore


@pytest.fixture
def store(tmp_path):
    """Spool rooted in a per-test temp dir"""
    return SpoolStore(str(tmp_path / "vardir"))


@pytest.fixture
def facts_payload():
    return {"facts": {"a": 1}}
