from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.documents import DocumentBuilder


@pytest.fixture
def documents(tmp_path: Path) -> DocumentBuilder:
    """Provide a document builder rooted at the pytest tmp_path."""
    return DocumentBuilder(tmp_path)
