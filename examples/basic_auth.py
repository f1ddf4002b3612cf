"""
Basic Authentication Example - Register, approve, log in, verify, log out.
"""

import asyncio

from market_auth import MarketAuthClient, Role
from market_auth.adapters import BcryptPasswordHasher, JWTTokenCodec
from market_auth.errors import MarketAuthError
from market_auth.resources import ORDERS
from market_auth.services import build_query


async def main():
    # Initialize client (in-memory stores by default)
    client = MarketAuthClient(
        tokens=JWTTokenCodec(secret="my-secret-key"),
        hasher=BcryptPasswordHasher(rounds=4),
    )

    # Admins are provisioned, never registered
    admin_record = await client.authenticator.provision_admin("Root Admin", "root@example.com", "rootpass1")
    print(f"Provisioned admin: {admin_record.email}")

    # Register a customer (usable immediately)
    ann = await client.register(
        "customer",
        {"name": "Ann Lee", "email": "ann@example.com", "password": "password1", "phone": "0711234567"},
    )
    print(f"\nRegistered customer: {ann['user']['name']} (token: {ann['token'][:30]}...)")

    # Register a seller (pending until approved)
    bob = await client.register(
        "seller",
        {
            "name": "Bob Stone",
            "email": "bob@example.com",
            "password": "password1",
            "shop_name": "Bob's Bakery",
            "phone": "0722345678",
            "address": "12 High Street",
        },
    )
    print(f"Registered seller: {bob['user']['shop_name']} ({bob['status']})")

    try:
        await client.login("bob@example.com", "password1")
    except MarketAuthError as e:
        print(f"\nSeller login before approval: {e.status_code} {e.message}")

    # Admin approves the seller
    admin_login = await client.login("root@example.com", "rootpass1")
    admin = await client.verify(f"Bearer {admin_login['token']}")
    await client.authenticator.approve(Role.SELLER, bob["user"]["id"], admin)

    result = await client.login("bob@example.com", "password1")
    print(f"Seller login after approval: status={result['user']['status']}")

    # Verify token and build a scoped query
    customer = await client.verify(f"Bearer {ann['token']}")
    spec = build_query({"customer_id": bob["user"]["id"], "limit": "500"}, ORDERS, customer)
    print(f"\nOrder query for customer: {spec.to_dict()}")

    # Logout
    client.logout(ann["token"])
    print("\nLogged out successfully")

    # Verify token after logout (should fail)
    try:
        await client.verify(f"Bearer {ann['token']}")
    except MarketAuthError as e:
        print(f"Token valid after logout: False ({e.status_code})")


if __name__ == "__main__":
    asyncio.run(main())
