"""
Integration tests for registration, login, logout and approval.

Runs the real services over in-memory stores, bcrypt at 4 rounds.
"""

import asyncio
import threading
import pytest
from market_auth.adapters import (
    BcryptPasswordHasher,
    JWTTokenCodec,
    MemoryCredentialStore,
    MemoryRevocationList,
)
from market_auth.domain.principal import Principal, Role
from market_auth.domain.query import Pagination, QuerySpec, SortSpec
from market_auth.errors import (
    AuthError,
    ConflictError,
    NotFoundError,
    PendingApprovalError,
    UnauthenticatedError,
    ValidationError,
)
from market_auth.services import Authenticator, SessionVerifier

CUSTOMER = {"name": "Ann Lee", "email": "ann@x.com", "password": "password1", "phone": "0711234567"}
SELLER = {
    "name": "Bob Stone",
    "email": "bob@shop.com",
    "password": "password1",
    "shop_name": "Bob's Bakery",
    "phone": "0722345678",
    "address": "12 High Street",
}
DELIVERER = {"name": "Dan Driver", "email": "dan@x.com", "password": "password1", "phone": "0733456789"}


class ThreadRecordingHasher(BcryptPasswordHasher):
    """bcrypt hasher that records which thread each call ran on."""

    def __init__(self):
        super().__init__(rounds=4)
        self.threads = []

    def hash(self, plain_password):
        self.threads.append(threading.get_ident())
        return super().hash(plain_password)

    def verify(self, plain_password, hashed):
        self.threads.append(threading.get_ident())
        return super().verify(plain_password, hashed)


class TestAuthenticatorFlow:
    """Account lifecycle against in-memory collections."""

    def setup_method(self):
        """Set up test fixtures."""
        self.store = MemoryCredentialStore()
        self.tokens = JWTTokenCodec(secret="test-secret-key", default_ttl=3600)
        self.revocations = MemoryRevocationList()
        self.auth = Authenticator(
            store=self.store,
            hasher=BcryptPasswordHasher(rounds=4),
            tokens=self.tokens,
            revocations=self.revocations,
        )
        self.verifier = SessionVerifier(self.tokens, self.revocations, self.store)

    async def _admin(self):
        record = await self.auth.provision_admin("Root Admin", "root@market.com", "rootpass1")
        return Principal(id=record.id, role=Role.ADMIN)

    @pytest.mark.asyncio
    async def test_customer_registration_returns_token(self):
        """Customers are usable immediately."""
        result = await self.auth.register("customer", CUSTOMER)

        assert result["token"]
        assert result["user"]["email"] == "ann@x.com"
        assert result["user"]["role"] == "customer"
        assert "password_hash" not in result["user"]

        principal = await self.verifier.verify(f"Bearer {result['token']}")
        assert principal.role == Role.CUSTOMER
        assert principal.id == result["user"]["id"]

    @pytest.mark.asyncio
    async def test_seller_registration_is_pending(self):
        """Sellers get no token and start pending."""
        result = await self.auth.register("seller", SELLER)

        assert "token" not in result
        assert result["status"] == "pending"
        assert result["user"]["status"] == "pending"

    @pytest.mark.asyncio
    async def test_email_unique_across_roles(self):
        """The same email (any case) cannot register under another role."""
        await self.auth.register("customer", CUSTOMER)

        with pytest.raises(ConflictError):
            await self.auth.register("seller", dict(SELLER, email="  ANN@X.COM "))
        with pytest.raises(ConflictError):
            await self.auth.register("deliverer", dict(DELIVERER, email="ann@x.com"))

    @pytest.mark.asyncio
    async def test_concurrent_registration_same_email(self):
        """Only one of several concurrent registrations of one email wins."""
        attempts = [
            self.auth.register("customer", CUSTOMER),
            self.auth.register("seller", dict(SELLER, email="ann@x.com")),
            self.auth.register("deliverer", dict(DELIVERER, email="Ann@x.com")),
        ]

        results = await asyncio.gather(*attempts, return_exceptions=True)

        successes = [r for r in results if not isinstance(r, Exception)]
        assert len(successes) == 1
        assert all(isinstance(r, ConflictError) for r in results if isinstance(r, Exception))

    @pytest.mark.asyncio
    async def test_admin_registration_refused(self):
        """Admins cannot self-register."""
        with pytest.raises(ValidationError):
            await self.auth.register("admin", dict(CUSTOMER, email="root@x.com"))

    @pytest.mark.asyncio
    async def test_login_probes_collections(self):
        """Login without a role finds the customer."""
        await self.auth.register("customer", CUSTOMER)

        result = await self.auth.login("ANN@x.com", "password1")

        assert result["user"]["role"] == "customer"
        assert self.tokens.decode(result["token"]).role == Role.CUSTOMER

    @pytest.mark.asyncio
    async def test_login_with_role_only_checks_that_collection(self):
        """A customer logging in as seller is not found."""
        await self.auth.register("customer", CUSTOMER)

        with pytest.raises(AuthError) as exc:
            await self.auth.login("ann@x.com", "password1", role="seller")
        assert exc.value.status_code == 401

    @pytest.mark.asyncio
    async def test_wrong_password_is_generic(self):
        """Unknown email and wrong password look the same."""
        await self.auth.register("customer", CUSTOMER)

        with pytest.raises(AuthError) as wrong:
            await self.auth.login("ann@x.com", "password2")
        with pytest.raises(AuthError) as missing:
            await self.auth.login("nobody@x.com", "password1")

        assert wrong.value.message == missing.value.message == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_pending_seller_login_forbidden(self):
        """Pending sellers fail login with 403, after the password check."""
        await self.auth.register("seller", SELLER)

        with pytest.raises(PendingApprovalError) as exc:
            await self.auth.login("bob@shop.com", "password1")
        assert exc.value.status_code == 403

        # Wrong password never discloses the pending status
        with pytest.raises(AuthError) as exc:
            await self.auth.login("bob@shop.com", "wrong-pass")
        assert exc.value.status_code == 401

    @pytest.mark.asyncio
    async def test_approve_then_login(self):
        """Approved sellers can log in and see their status."""
        admin = await self._admin()
        seller = await self.auth.register("seller", SELLER)

        approved = await self.auth.approve("seller", seller["user"]["id"], admin)
        assert approved["status"] == "approved"

        result = await self.auth.login("bob@shop.com", "password1", role="seller")
        assert result["token"]
        assert result["user"]["status"] == "approved"

    @pytest.mark.asyncio
    async def test_reject_requires_reason(self):
        """Rejection needs a reason; rejected sellers cannot log in."""
        admin = await self._admin()
        seller = await self.auth.register("seller", SELLER)

        with pytest.raises(ValidationError):
            await self.auth.reject("seller", seller["user"]["id"], "", admin)

        await self.auth.reject("seller", seller["user"]["id"], "Blurry documents", admin)

        with pytest.raises(PendingApprovalError) as exc:
            await self.auth.login("bob@shop.com", "password1")
        assert "Blurry documents" in exc.value.message

    @pytest.mark.asyncio
    async def test_approve_twice_fails(self):
        """Re-approving an approved seller is a validation error."""
        admin = await self._admin()
        seller = await self.auth.register("seller", SELLER)
        await self.auth.approve("seller", seller["user"]["id"], admin)

        with pytest.raises(ValidationError):
            await self.auth.approve("seller", seller["user"]["id"], admin)

    @pytest.mark.asyncio
    async def test_approve_unknown_record(self):
        """Approving a missing seller is 404; approving a customer is invalid."""
        admin = await self._admin()

        with pytest.raises(NotFoundError):
            await self.auth.approve("seller", "f" * 24, admin)
        with pytest.raises(ValidationError):
            await self.auth.approve("customer", "f" * 24, admin)

    @pytest.mark.asyncio
    async def test_deactivated_account_cannot_login(self):
        """Deactivated accounts fail login with 401."""
        result = await self.auth.register("customer", CUSTOMER)
        await self.auth.set_active("customer", result["user"]["id"], False)

        with pytest.raises(AuthError) as exc:
            await self.auth.login("ann@x.com", "password1")
        assert "deactivated" in exc.value.message
        assert exc.value.status_code == 401

    @pytest.mark.asyncio
    async def test_logout_revokes_token(self):
        """A token stops working after logout."""
        result = await self.auth.register("customer", CUSTOMER)
        token = result["token"]
        await self.verifier.verify(f"Bearer {token}")

        assert self.auth.logout(token) is True
        assert self.auth.logout(token) is False  # idempotent

        with pytest.raises(UnauthenticatedError):
            await self.verifier.verify(f"Bearer {token}")

    @pytest.mark.asyncio
    async def test_logout_never_fails(self):
        """Unreadable tokens are still revoked; empty tokens are ignored."""
        assert self.auth.logout("garbage") is True
        assert self.revocations.is_revoked("garbage")
        assert self.auth.logout("") is False

    @pytest.mark.asyncio
    async def test_profile_is_fresh(self):
        """profile re-reads the record."""
        admin = await self._admin()
        seller = await self.auth.register("seller", SELLER)
        principal = Principal(id=seller["user"]["id"], role=Role.SELLER)

        assert (await self.auth.profile(principal))["status"] == "pending"
        await self.auth.approve("seller", principal.id, admin)
        assert (await self.auth.profile(principal))["status"] == "approved"

    @pytest.mark.asyncio
    async def test_list_pending(self):
        """Only pending records are listed for approval."""
        admin = await self._admin()
        first = await self.auth.register("seller", SELLER)
        await self.auth.register("seller", dict(SELLER, email="eve@shop.com"))
        await self.auth.approve("seller", first["user"]["id"], admin)

        spec = QuerySpec(filter={}, sort=SortSpec("created_at"), pagination=Pagination())
        records, total = await self.auth.list_pending("seller", spec)

        assert total == 1
        assert records[0].email == "eve@shop.com"

    @pytest.mark.asyncio
    async def test_ensure_admin_is_idempotent(self):
        """Bootstrapping the same admin twice creates it once."""
        assert await self.auth.ensure_admin("Root Admin", "root@market.com", "rootpass1") is not None
        assert await self.auth.ensure_admin("Root Admin", "root@market.com", "rootpass1") is None

        result = await self.auth.login("root@market.com", "rootpass1")
        assert result["user"]["role"] == "admin"

    @pytest.mark.asyncio
    async def test_ensure_admin_skips_email_of_other_role(self):
        """A bootstrap address already used by a customer is left alone."""
        await self.auth.register("customer", dict(CUSTOMER, email="root@market.com"))

        assert await self.auth.ensure_admin("Root Admin", "root@market.com", "rootpass1") is None

        result = await self.auth.login("root@market.com", "password1")
        assert result["user"]["role"] == "customer"

    @pytest.mark.asyncio
    async def test_password_hashing_runs_off_event_loop(self):
        """bcrypt work happens in worker threads, not on the loop thread."""
        hasher = ThreadRecordingHasher()
        auth = Authenticator(self.store, hasher, self.tokens, self.revocations)

        await auth.register("customer", CUSTOMER)
        await auth.login("ann@x.com", "password1")

        assert len(hasher.threads) == 2
        assert threading.get_ident() not in hasher.threads
