import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch):
    for name in ("RAWHTTP_LOG_LEVEL", "RAWHTTP_LOG_JSON", "RAWHTTP_LOG_FILE", "RAWHTTP_STRICT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("rawhttp.cli.load_environment", lambda: {})
    yield
