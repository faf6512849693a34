"""Test configuration for pytest."""

import logging
import os
import pytest


@pytest.fixture(autouse=True)
def configure_test_logging():
    """Configure logging for tests to be minimal."""
    os.environ['ASSETLENS_LOG_LEVEL'] = 'WARNING'

    logging.getLogger().setLevel(logging.WARNING)

    # Decode failures are expected in several tests
    for logger_name in ['assetlens.similarity.runner', 'assetlens.similarity.cluster']:
        logging.getLogger(logger_name).setLevel(logging.ERROR)
