from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class ResourceConstant(str, Enum):
    PRODUCTS = "products"
    USERS = "users"
    USERS_POLICY = "users-policy"
    GLOBAL_COUNTER = "global-counter"
    USER_POOL = "user-pool"


@dataclass(frozen=True)
class ResourceNamingKey:
    product_short_name: str
    org_short_name: Optional[str]
    stage: str
    resource_constant: ResourceConstant


def generate_resource_name(
    product_short_name: str,
    org_short_name: Optional[str],
    stage: str,
    resource_constant: str,
) -> str:
    constant = getattr(resource_constant, "value", resource_constant)
    # org is optional; absent segments are skipped
    return "-".join(part for part in (product_short_name, org_short_name, stage, constant) if part)


def lower_name(value):
    return value.lower() if value else value


def resolve_naming_keys(source) -> Tuple[ResourceNamingKey, ...]:
    """Naming keys for every table constant, in declaration order.

    ``source`` is anything carrying product_short_name, org_short_name and
    stage (an ApiDescriptor or a ResolvedStackConfig).
    """
    product = lower_name(source.product_short_name)
    org = lower_name(source.org_short_name)
    keys = []
    for constant in ResourceConstant:
        if constant is ResourceConstant.USER_POOL:
            # user-pool names were always derived from lower-cased short names,
            # kept explicit here even though the others are lower-cased too
            keys.append(ResourceNamingKey(lower_name(product), lower_name(org), source.stage, constant))
        else:
            keys.append(ResourceNamingKey(product, org, source.stage, constant))
    return tuple(keys)


def name_for(key: ResourceNamingKey, naming=generate_resource_name) -> str:
    return naming(
        product_short_name=key.product_short_name,
        org_short_name=key.org_short_name,
        stage=key.stage,
        resource_constant=key.resource_constant.value,
    )
