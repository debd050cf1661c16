import pytest
from django.core.cache import cache


@pytest.fixture(autouse=True)
def _clear_throttle_cache():
    """Throttle counters live in the default cache; start every test fresh."""
    cache.clear()
    yield
    cache.clear()
