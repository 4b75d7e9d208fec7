from pathlib import Path

import pytest

DATA = Path(__file__).parent / "data"


@pytest.fixture
def corpus_path() -> Path:
    return DATA / "manglings.txt"
