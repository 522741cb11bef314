import json
from pathlib import Path
from typing import Any

import pytest

VALID_TOKEN = "Abcdefghij0123456789KLMNOPQRST0123456789"
OTHER_TOKEN = "ZyxwvutsrqZYXWVUTSRQ98765432109876543210"


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


def write_config(directory: Path, payload: Any) -> Path:
    path = directory / ".orcaai.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


class SleepRecorder:
    """Stand-in for asyncio.sleep that records the requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
