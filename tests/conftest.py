import sys
from pathlib import Path

import pytest

# Ensure the project root is importable when pytest starts from any directory
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from vigenere import SAMPLE_PLAINTEXT  # noqa: E402


@pytest.fixture
def passage_600():
    """600 letters of English: long enough for a six-letter key."""
    return SAMPLE_PLAINTEXT[:600]


@pytest.fixture
def passage_300():
    return SAMPLE_PLAINTEXT[:300]
