from datetime import UTC, datetime

import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def groupbuy_bed():
    from groupbuy.domain import groupbuy

    bed = DomainFixture(groupbuy)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(groupbuy_bed):
    with groupbuy_bed.domain_context():
        yield


@pytest.fixture()
def catalog():
    """In-memory catalog seeded with a few products at round prices."""
    from groupbuy.cart import get_catalog

    catalog = get_catalog()
    catalog.add_product("prod-rice", "Basmati Rice", 100.0, unit="kg")
    catalog.add_product("prod-dal", "Toor Dal", 50.0, unit="kg")
    catalog.add_product("prod-oil", "Mustard Oil", 150.0, unit="l")
    catalog.add_product("prod-tea", "Assam Tea", 25.0, unit="pack")
    return catalog


@pytest.fixture()
def carts():
    from groupbuy.cart import get_cart_store

    return get_cart_store()


@pytest.fixture()
def now():
    return datetime(2026, 3, 14, 10, 0, tzinfo=UTC)
