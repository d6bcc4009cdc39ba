# pylint: disable=missing-module-docstring,missing-function-docstring
import json
from typing import Any

import pytest

from observability import logger


@pytest.fixture
def events(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, Any]]:
    """Capture every emitted log event as a decoded dict."""
    captured: list[dict[str, Any]] = []
    monkeypatch.setattr(logger, "_print", lambda line: captured.append(json.loads(line)))
    monkeypatch.setattr(logger, "_min_level", logger._LEVELS["DEBUG"])  # pylint: disable=protected-access
    monkeypatch.setattr(logger, "_json_lines", True)
    return captured

