from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.source_tree import SourceTreeBuilder
from topicdoc.parser.attributes import reset_page_footer
from topicdoc.topics import use_topic_types


@pytest.fixture
def source_tree(tmp_path: Path) -> SourceTreeBuilder:
    """Provide a reusable source tree builder rooted at the pytest tmp_path."""
    return SourceTreeBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _reset_process_state() -> Iterator[None]:
    """Restore the built-in topic types and drop the cached page footer."""
    yield
    use_topic_types(None)
    reset_page_footer()
