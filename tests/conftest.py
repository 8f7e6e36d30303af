import pytest

from response_error.runtime.registry import REGISTRY


@pytest.fixture(autouse=True)
def restore_global_transform():
    """Keep policy swaps made by one test out of the next."""
    previous = REGISTRY.current()
    yield
    REGISTRY.set_active(previous)
