from pathlib import Path

import pytest


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Automatically mark all tests collected in this directory as 'integration'."""
    for item in items:
        item_path = Path(str(item.fspath))
        if "integration" in item_path.parts:
            item.add_marker("integration")
