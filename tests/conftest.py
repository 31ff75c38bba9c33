from __future__ import annotations

import importlib.util
import sys
import textwrap
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


import pytest

from metagen.capture.normalize import parse_declaration
from metagen.runtime.env_policy import MODE_ENV_KEY, ROOT_ENV_KEY
from metagen.store import FragmentStore, command_key
from metagen.synthesis.model import CommandFragment
from metagen.synthesis.naming import snake


@pytest.fixture(autouse=True)
def _clean_metagen_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv(MODE_ENV_KEY, raising=False)
    monkeypatch.delenv(ROOT_ENV_KEY, raising=False)
    yield


@pytest.fixture
def store(tmp_path: Path) -> FragmentStore:
    return FragmentStore(tmp_path / ".autogen")


@pytest.fixture
def decl():
    def _decl(source: str):
        return parse_declaration(textwrap.dedent(source).strip() + "\n")

    return _decl


@pytest.fixture
def write_fragment():
    def _write(root: Path, name: str, code: int, source: str) -> Path:
        fragment = CommandFragment(name=name, code=code, source_text=source)
        return FragmentStore(root).put(
            command_key(snake(name)), fragment.to_document()
        )

    return _write


@pytest.fixture
def load_module():
    loaded: list[str] = []

    def _load(name: str, path: Path):
        spec = importlib.util.spec_from_file_location(name, path)
        assert spec is not None and spec.loader is not None
        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        loaded.append(name)
        spec.loader.exec_module(module)
        return module

    yield _load
    for name in loaded:
        sys.modules.pop(name, None)
