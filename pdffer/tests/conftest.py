import pytest

from pdffer.app.config import get_settings
from pdffer.app.templates.mapper import default_mapper
from pdffer.app.templates.registry import TemplateRegistry


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings and the default mapper are cached per process; reset them."""
    get_settings.cache_clear()
    default_mapper.cache_clear()
    yield
    get_settings.cache_clear()
    default_mapper.cache_clear()


@pytest.fixture
def registry() -> TemplateRegistry:
    return TemplateRegistry()
