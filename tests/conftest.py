"""
Shared test fixtures.

Template providers are in-memory; the API client never reads the
templates directory except through the fixtures below.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

import pytest
from datetime import datetime, timezone

from models.conversion import TargetFormat
from tests.factories import ebay_template_bytes

TEMPLATES_DIR = project_dir / "templates"


@pytest.fixture
def fixed_now():
    """Pinned clock for sale windows and filenames."""
    return datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def ebay_template():
    return ebay_template_bytes()


@pytest.fixture
def template_provider(ebay_template):
    """Provider holding all three CSV templates."""
    from services.template_service import InMemoryTemplateProvider

    return InMemoryTemplateProvider({
        TargetFormat.EBAY: ebay_template,
        TargetFormat.GOOGLE: (TEMPLATES_DIR / "google-template.csv").read_bytes(),
        TargetFormat.FACEBOOK: (TEMPLATES_DIR / "facebook-template.csv").read_bytes(),
    })


@pytest.fixture
def empty_provider():
    """Provider with no default templates installed."""
    from services.template_service import InMemoryTemplateProvider

    return InMemoryTemplateProvider()


@pytest.fixture
def conversion_service(template_provider):
    from services.conversion_service import ConversionService

    return ConversionService(provider=template_provider)


@pytest.fixture
def make_client():
    """Build a TestClient whose templates come from the given provider."""
    from fastapi.testclient import TestClient
    from main import app
    from services.conversion_service import ConversionService, get_conversion_service
    from services.template_service import get_template_provider

    def _make(provider):
        app.dependency_overrides[get_conversion_service] = lambda: ConversionService(provider=provider)
        app.dependency_overrides[get_template_provider] = lambda: provider
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client, template_provider):
    return make_client(template_provider)
