"""
Listing configuration for every list endpoint.

Each ListingSpec names the filterable fields, the free-text search fields
and the mandatory per-role scope. Field names match the record and
document keys used by the stores.
"""

from market_auth.domain.principal import Role
from market_auth.domain.query import FieldKind, ListingSpec

K = FieldKind


def _self(principal):
    return {"id": principal.id}


CUSTOMERS = ListingSpec(
    fields={
        "name": K.STRING,
        "email": K.STRING,
        "phone": K.STRING,
        "active": K.BOOLEAN,
    },
    search_fields=("name", "email", "phone", "address"),
    role_scopes={Role.CUSTOMER: _self},
    sortable=frozenset({"name", "email"}),
)

SELLERS = ListingSpec(
    fields={
        "status": K.STRING,
        "name": K.STRING,
        "email": K.STRING,
        "shop_name": K.STRING,
        "active": K.BOOLEAN,
    },
    search_fields=("name", "email", "shop_name", "phone", "address"),
    role_scopes={Role.SELLER: _self},
    sortable=frozenset({"name", "shop_name", "status"}),
)

# Anonymous storefront directory
PUBLIC_SELLERS = ListingSpec(
    fields={
        "address": K.STRING,
        "shop_name": K.STRING,
    },
    search_fields=("name", "shop_name", "address"),
    default_filters={"status": "approved", "active": True},
    sortable=frozenset({"name", "shop_name"}),
)

DELIVERERS = ListingSpec(
    fields={
        "name": K.STRING,
        "email": K.STRING,
        "phone": K.STRING,
        "status": K.STRING,
        "vehicle_no": K.STRING,
        "vehicle_type": K.STRING,
        "active": K.BOOLEAN,
    },
    search_fields=("name", "email", "phone", "address", "vehicle_no", "vehicle_type"),
    role_scopes={Role.DELIVERER: _self},
    sortable=frozenset({"name", "status", "vehicle_type"}),
)

PRODUCTS = ListingSpec(
    fields={
        "instock": K.BOOLEAN,
        "price": K.NUMBER_RANGE,
        "discount": K.NUMBER_RANGE,
        "seller_id": K.OBJECT_ID,
        "category": K.ARRAY,
    },
    search_fields=("name", "description"),
    role_scopes={Role.SELLER: lambda p: {"seller_id": p.id}},
    sortable=frozenset({"name", "price", "discount"}),
)

# Order documents carry seller_ids: the sellers whose products are in the order
ORDERS = ListingSpec(
    fields={
        "status": K.STRING,
        "customer_id": K.OBJECT_ID,
        "total_amount": K.NUMBER_RANGE,
        "order_date": K.DATE_RANGE,
    },
    role_scopes={
        Role.CUSTOMER: lambda p: {"customer_id": p.id},
        Role.SELLER: lambda p: {"seller_ids": p.id},
        Role.DELIVERER: lambda p: {"deliverer_id": p.id},
    },
    sortable=frozenset({"status", "total_amount", "order_date"}),
)

PAYMENTS = ListingSpec(
    fields={
        "payment_method": K.STRING,
        "order_id": K.OBJECT_ID,
        "customer_id": K.OBJECT_ID,
        "amount": K.NUMBER_RANGE,
    },
    role_scopes={Role.CUSTOMER: lambda p: {"customer_id": p.id}},
    sortable=frozenset({"amount", "payment_method"}),
)

# Reviews are public. Customers passing my_reviews=true get MY_REVIEWS.
REVIEWS = ListingSpec(
    fields={
        "product_id": K.OBJECT_ID,
        "order_id": K.OBJECT_ID,
        "customer_id": K.OBJECT_ID,
        "rating": K.NUMBER_RANGE,
    },
    search_fields=("comment",),
    sortable=frozenset({"rating"}),
)

MY_REVIEWS = ListingSpec(
    fields=REVIEWS.fields,
    search_fields=REVIEWS.search_fields,
    role_scopes={Role.CUSTOMER: lambda p: {"customer_id": p.id}},
    sortable=REVIEWS.sortable,
)

# Delivery documents carry customer_id copied from their order
DELIVERIES = ListingSpec(
    fields={
        "status": K.STRING,
        "order_id": K.OBJECT_ID,
        "deliverer_id": K.OBJECT_ID,
        "delivered_date": K.DATE_RANGE,
    },
    search_fields=("address",),
    role_scopes={
        Role.DELIVERER: lambda p: {"deliverer_id": p.id},
        Role.CUSTOMER: lambda p: {"customer_id": p.id},
    },
    sortable=frozenset({"status", "delivered_date"}),
)
