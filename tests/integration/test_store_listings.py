"""
Integration tests for built queries executed against the in-memory stores.

Covers the filters that depend on what the stores actually persist:
`active` flags, approval status, default filters and date ranges.
"""

from datetime import datetime, timezone

import pytest
from market_auth.adapters import MemoryCredentialStore, MemoryDocumentStore
from market_auth.domain.principal import ApprovalStatus, Principal, Role
from market_auth.resources import CUSTOMERS, ORDERS, PUBLIC_SELLERS, SELLERS
from market_auth.services import build_query

ADMIN = Principal(id="a" * 24, role=Role.ADMIN)


def _customer(email):
    return {"name": "Ann Lee", "email": email, "password_hash": "$2b$04$x", "phone": "0711234567"}


def _seller(email, shop_name):
    return {
        "name": "Bob Stone",
        "email": email,
        "password_hash": "$2b$04$x",
        "shop_name": shop_name,
        "phone": "0722345678",
        "address": "12 High Street",
    }


class TestCredentialListings:
    """Identity listings through MemoryCredentialStore.search."""

    def setup_method(self):
        """Set up test fixtures."""
        self.store = MemoryCredentialStore()

    @pytest.mark.asyncio
    async def test_new_accounts_match_active_filter(self):
        """Freshly created records are stored as active."""
        await self.store.create(Role.CUSTOMER, _customer("ann@x.com"))

        records, total = await self.store.search(Role.CUSTOMER, build_query({"active": "true"}, CUSTOMERS, ADMIN))

        assert total == 1
        assert records[0].email == "ann@x.com"

    @pytest.mark.asyncio
    async def test_inactive_filter_after_deactivation(self):
        """active=false finds deactivated accounts only."""
        ann = await self.store.create(Role.CUSTOMER, _customer("ann@x.com"))
        await self.store.create(Role.CUSTOMER, _customer("cat@x.com"))
        await self.store.set_active(Role.CUSTOMER, ann.id, False)

        inactive, _ = await self.store.search(Role.CUSTOMER, build_query({"active": "false"}, CUSTOMERS, ADMIN))
        active, _ = await self.store.search(Role.CUSTOMER, build_query({"active": "true"}, CUSTOMERS, ADMIN))

        assert [r.email for r in inactive] == ["ann@x.com"]
        assert [r.email for r in active] == ["cat@x.com"]

    @pytest.mark.asyncio
    async def test_public_sellers_default_filters(self):
        """Only approved and active sellers reach the public directory."""
        bob = await self.store.create(Role.SELLER, _seller("bob@shop.com", "Bob's Bakery"))
        eve = await self.store.create(Role.SELLER, _seller("eve@shop.com", "Eve's Deli"))
        await self.store.create(Role.SELLER, _seller("sam@shop.com", "Sam's Pending"))
        await self.store.update_status(Role.SELLER, bob.id, ApprovalStatus.APPROVED, approved_by=ADMIN.id)
        await self.store.update_status(Role.SELLER, eve.id, ApprovalStatus.APPROVED, approved_by=ADMIN.id)
        await self.store.set_active(Role.SELLER, eve.id, False)

        records, total = await self.store.search(Role.SELLER, build_query({}, PUBLIC_SELLERS))

        assert total == 1
        assert records[0].email == "bob@shop.com"

    @pytest.mark.asyncio
    async def test_status_filter(self):
        """status narrows sellers by approval state."""
        bob = await self.store.create(Role.SELLER, _seller("bob@shop.com", "Bob's Bakery"))
        await self.store.create(Role.SELLER, _seller("eve@shop.com", "Eve's Deli"))
        await self.store.update_status(Role.SELLER, bob.id, ApprovalStatus.APPROVED, approved_by=ADMIN.id)

        pending, _ = await self.store.search(Role.SELLER, build_query({"status": "pending"}, SELLERS, ADMIN))
        approved, _ = await self.store.search(Role.SELLER, build_query({"status": "approved"}, SELLERS, ADMIN))

        assert [r.email for r in pending] == ["eve@shop.com"]
        assert [r.email for r in approved] == ["bob@shop.com"]


class TestDocumentListings:
    """Entity listings through MemoryDocumentStore.find."""

    def setup_method(self):
        """Set up test fixtures."""
        self.documents = MemoryDocumentStore()

    async def _order(self, day, hour=12):
        return await self.documents.insert(
            "orders",
            {
                "customer_id": "c" * 24,
                "status": "pending",
                "total_amount": 20,
                "order_date": datetime(2026, 1, day, hour, tzinfo=timezone.utc),
            },
        )

    @pytest.mark.asyncio
    async def test_date_range_includes_whole_end_day(self):
        """order_date_to keeps orders placed late on the final day."""
        await self._order(1, hour=0)
        late = await self._order(31, hour=23)
        await self._order(31, hour=23)
        await self.documents.update("orders", late["id"], {"order_date": datetime(2026, 2, 1, tzinfo=timezone.utc)})

        spec = build_query({"order_date_from": "2026-01-01", "order_date_to": "2026-01-31"}, ORDERS, ADMIN)

        assert await self.documents.count("orders", spec.filter) == 2

    @pytest.mark.asyncio
    async def test_date_range_with_utc_suffix(self):
        """A Z-suffixed bound filters like its +00:00 form."""
        await self._order(5, hour=8)
        await self._order(5, hour=10)

        spec = build_query({"order_date_from": "2026-01-05T09:00:00Z"}, ORDERS, ADMIN)
        found = await self.documents.find("orders", spec.filter)

        assert [doc["order_date"].hour for doc in found] == [10]
