import logging

import pytest


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo the handlers and level that cli.setup_logging installs."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)
