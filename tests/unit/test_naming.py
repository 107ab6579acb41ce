from api_gen.descriptor import parse_api_descriptor
from api_gen.naming import (
    ResourceConstant,
    ResourceNamingKey,
    generate_resource_name,
    lower_name,
    name_for,
    resolve_naming_keys,
)


def test_generate_resource_name():
    assert generate_resource_name("shop", "acme", "prod", "users") == "shop-acme-prod-users"
    assert generate_resource_name("shop", None, "prod", "users-policy") == "shop-prod-users-policy"
    assert generate_resource_name("shop", "acme", "dev", ResourceConstant.USER_POOL) == "shop-acme-dev-user-pool"


def test_resolve_naming_keys_order_and_case(descriptor_data):
    keys = resolve_naming_keys(parse_api_descriptor(descriptor_data))

    assert [k.resource_constant for k in keys] == [
        ResourceConstant.PRODUCTS,
        ResourceConstant.USERS,
        ResourceConstant.USERS_POLICY,
        ResourceConstant.GLOBAL_COUNTER,
        ResourceConstant.USER_POOL,
    ]
    assert all(k.product_short_name == "shop" and k.org_short_name == "acme" for k in keys)
    assert all(k.stage == "prod" for k in keys)


def test_resolve_naming_keys_is_pure(descriptor_data):
    descriptor = parse_api_descriptor(descriptor_data)
    assert resolve_naming_keys(descriptor) == resolve_naming_keys(descriptor)


def test_resolve_naming_keys_without_org(descriptor_data):
    descriptor_data.pop("orgShortName")
    keys = resolve_naming_keys(parse_api_descriptor(descriptor_data))
    assert all(k.org_short_name is None for k in keys)


def test_name_for_passes_keywords_to_naming_function():
    calls = []

    def naming(**kwargs):
        calls.append(kwargs)
        return "table"

    key = ResourceNamingKey("shop", "acme", "prod", ResourceConstant.GLOBAL_COUNTER)
    assert name_for(key, naming) == "table"
    assert calls == [
        {
            "product_short_name": "shop",
            "org_short_name": "acme",
            "stage": "prod",
            "resource_constant": "global-counter",
        }
    ]


def test_lower_name_keeps_missing_values():
    assert lower_name("Acme") == "acme"
    assert lower_name(None) is None
    assert lower_name("") == ""
