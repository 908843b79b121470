import os
import random


def pytest_sessionstart(session):
    """Tests that need determinism seed their own ``random.Random``."""
    random.seed()
    os.environ.setdefault("SIM_MAX_WORKERS", "2")
