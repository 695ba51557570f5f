from __future__ import annotations

import pytest

from molchat.config import Settings
from tests.fakes import TINY_PDB, FakeEngine, FakeLLM


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    for name in ("MOLCHAT_API_KEY", "MOLCHAT_MODEL", "MOLCHAT_API_BASE"):
        monkeypatch.delenv(name, raising=False)
    return Settings(_env_file=None, api_key=None, click_grace_seconds=0.0)


@pytest.fixture
def tiny_pdb(tmp_path) -> str:
    path = tmp_path / "tiny.pdb"
    path.write_text(TINY_PDB, encoding="utf-8")
    return str(path)
