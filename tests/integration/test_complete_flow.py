"""
Integration test for the complete authentication and authorization flow.

Tests the recommended architecture through MarketAuthClient:
1. Authenticator - register / login
2. SessionVerifier - resolve the bearer token to a principal
3. RolePolicyAdapter - approval and ownership gates
4. Query builder - scoped listing for the principal
"""

import pytest
from market_auth import MarketAuthClient, Role
from market_auth.config import Settings
from market_auth.errors import ForbiddenError, UnauthenticatedError
from market_auth.resources import PRODUCTS
from market_auth.services import build_query


@pytest.mark.asyncio
async def test_complete_seller_flow():
    """Test complete flow from signup to a scoped product listing."""
    settings = Settings(
        env="test",
        jwt_secret="test-secret-key",
        bcrypt_rounds=4,
        bootstrap_admin_email="root@market.com",
        bootstrap_admin_password="rootpass1",
    )
    client = MarketAuthClient.from_settings(settings)

    # Step 0: Bootstrap the admin from settings (only once)
    assert await client.bootstrap_admin(settings) is True
    assert await client.bootstrap_admin(settings) is False

    # Step 1: Seller signs up and waits for approval
    registered = await client.register(
        "seller",
        {
            "name": "Bob Stone",
            "email": "bob@shop.com",
            "password": "password1",
            "shop_name": "Bob's Bakery",
            "phone": "0722345678",
            "address": "12 High Street",
        },
    )
    seller_id = registered["user"]["id"]

    # Step 2: Admin approves
    admin_login = await client.login("root@market.com", "rootpass1")
    admin = await client.verify(f"Bearer {admin_login['token']}")
    assert admin.is_admin
    await client.authenticator.approve(Role.SELLER, seller_id, admin)

    # Step 3: Seller logs in and passes the approval gate
    seller_login = await client.login("bob@shop.com", "password1")
    seller = await client.verify(f"Bearer {seller_login['token']}")
    assert await client.policy.require_approved(seller, Role.SELLER) is seller

    # Step 4: Seller product listing is scoped to the seller
    spec = build_query({"seller_id": "0" * 24}, PRODUCTS, seller)
    assert spec.filter["seller_id"] == seller_id

    # Step 5: Ownership on someone else's record
    with pytest.raises(ForbiddenError):
        client.policy.ensure_owner(seller, "0" * 24, resource="product")

    # Step 6: Logout invalidates the token
    assert client.logout(seller_login["token"]) is True
    with pytest.raises(UnauthenticatedError):
        await client.verify(f"Bearer {seller_login['token']}")
