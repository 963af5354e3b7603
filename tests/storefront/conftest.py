import pytest
from protean.integrations.pytest import DomainFixture
from storefront.config import get_settings
from storefront.gateway import reset_gateway, set_gateway
from storefront.gateway.fake_adapter import FakeStoreGateway


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()


@pytest.fixture(autouse=True)
def gateway():
    """A fresh in-memory store for every test."""
    get_settings.cache_clear()
    fake = FakeStoreGateway()
    set_gateway(fake)
    yield fake
    reset_gateway()
    get_settings.cache_clear()


@pytest.fixture()
def configure_settings(monkeypatch):
    """Override RUNGEAR_* settings for one test."""

    def _configure(**values):
        for key, value in values.items():
            monkeypatch.setenv(f"RUNGEAR_{key.upper()}", str(value))
        get_settings.cache_clear()

    return _configure


@pytest.fixture()
def member_id():
    return 42


@pytest.fixture()
def checkout_form():
    return {
        "full_name": "Juan Dela Cruz",
        "email": "juan@example.com",
        "phone": "+63 917 555 0101",
        "address": "12 Katipunan Ave",
        "city": "Quezon City",
        "postal_code": "1108",
        "delivery_option": "Standard",
        "payment_method": "Card",
        "card_number": "4111111111111111",
        "card_expiry": "12/28",
        "card_cvv": "123",
    }
