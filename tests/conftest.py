import sys
import pathlib

import pytest

# Ensure project root is importable in tests
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.config import Settings  # noqa: E402


@pytest.fixture
def local_settings():
    return Settings(local_model_url="http://localhost:11434/api/chat", together_api_key="test-key")


@pytest.fixture
def remote_only_settings():
    return Settings(together_api_key="test-key")
