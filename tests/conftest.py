import os

import pytest


@pytest.fixture(scope="session", autouse=True)
def isolate_changelog_environment():
    """Temporarily remove ``CHANGELOG_*`` environment variables.

    The CLI reads option defaults from variables with that prefix. This
    fixture moves them aside for the duration of the test session and
    restores them afterwards.
    """
    saved = {key: value for key, value in os.environ.items() if key.startswith("CHANGELOG_")}
    for key in saved:
        del os.environ[key]

    try:
        yield
    finally:
        os.environ.update(saved)
