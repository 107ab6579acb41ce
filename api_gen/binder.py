"""Resolve an API descriptor into the inputs of the provisioning calls.

Nothing in this module touches CDK or AWS. ``bind_api`` validates the
descriptor first and only then asks the naming function for table names, so a
broken descriptor never reaches the naming convention or the grant plan.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Tuple

from api_gen.descriptor import ApiDescriptor, EndpointDescriptor
from api_gen.errors import ConfigurationError, ResourceNotFoundError
from api_gen.naming import (
    ResourceConstant,
    generate_resource_name,
    lower_name,
    name_for,
    resolve_naming_keys,
)

logger = logging.getLogger(__name__)

LAMBDA_ROLE_ACTIONS = ("ssm:GetParameter", "logs:*")

AUTHORIZER_TABLES = (
    ResourceConstant.USERS,
    ResourceConstant.USERS_POLICY,
    ResourceConstant.PRODUCTS,
    ResourceConstant.USER_POOL,
)
ENDPOINT_TABLES = (ResourceConstant.PRODUCTS, ResourceConstant.GLOBAL_COUNTER)


@dataclass(frozen=True)
class AuthorizationResolution:
    required: bool
    unit_path: Optional[Path] = None


@dataclass(frozen=True)
class ResolvedStackConfig:
    product_short_name: str
    org_short_name: Optional[str]
    stage: str
    gateway_name: Optional[str]
    endpoints: Tuple[EndpointDescriptor, ...]
    authorization: AuthorizationResolution
    base_dir: Path
    cors_config: Any = None
    mapping_domain: Optional[str] = None
    certificate_arn: Optional[str] = None
    region: Optional[str] = None
    account: Optional[str] = None

    @property
    def is_authorization_exists(self) -> bool:
        return self.authorization.required


@dataclass(frozen=True)
class ResolvedTables:
    names: Mapping[ResourceConstant, str]

    def __getitem__(self, constant) -> str:
        return self.names[ResourceConstant(constant)]

    @property
    def products(self):
        return self[ResourceConstant.PRODUCTS]

    @property
    def users(self):
        return self[ResourceConstant.USERS]

    @property
    def users_policy(self):
        return self[ResourceConstant.USERS_POLICY]

    @property
    def global_counter(self):
        return self[ResourceConstant.GLOBAL_COUNTER]

    @property
    def user_pool(self):
        return self[ResourceConstant.USER_POOL]


@dataclass(frozen=True)
class Grant:
    resource: ResourceConstant
    table_name: str


@dataclass(frozen=True)
class RoleStatement:
    actions: Tuple[str, ...] = LAMBDA_ROLE_ACTIONS
    resources: Tuple[str, ...] = ("*",)


@dataclass(frozen=True)
class GrantPlan:
    authorizer_grants: Tuple[Grant, ...]
    endpoint_grants: Tuple[Grant, ...]
    lambda_role: RoleStatement = field(default_factory=RoleStatement)


@dataclass(frozen=True)
class AuthorizerBinding:
    unit_path: Path
    environment: Mapping[str, str]
    grants: Tuple[Grant, ...]


@dataclass(frozen=True)
class EndpointBinding:
    endpoint: EndpointDescriptor
    compute_unit: Path
    environment: Mapping[str, str]
    grants: Tuple[Grant, ...]
    # empty when the endpoint is not gated by the authorizer
    authorizer_environment: Mapping[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.endpoint.service_method_name

    @property
    def authorized(self) -> bool:
        return bool(self.authorizer_environment)


@dataclass(frozen=True)
class ApiBinding:
    config: ResolvedStackConfig
    tables: ResolvedTables
    grants: GrantPlan
    endpoints: Tuple[EndpointBinding, ...]
    authorizer: Optional[AuthorizerBinding] = None


def _require(value, message):
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ConfigurationError(message)
    return value


def resolve_authorization(descriptor: ApiDescriptor, base_dir) -> AuthorizationResolution:
    feature = descriptor.authorization
    if feature is None:
        return AuthorizationResolution(required=False)
    path = _require(feature.path, "features.Authorization.path is required when authorization is enabled")
    return AuthorizationResolution(required=True, unit_path=Path(base_dir) / path)


def resolve_domain_mapping(descriptor: ApiDescriptor) -> Optional[str]:
    if not descriptor.server_url:
        if descriptor.server_url_sub_domain:
            raise ConfigurationError("serverUrl is required when serverUrlSubDomain is set")
        return None
    prefix = f"{descriptor.server_url_sub_domain}-" if descriptor.server_url_sub_domain else ""
    return f"{prefix}{descriptor.stage}.{descriptor.server_url}"


def _validate_endpoint(index, endpoint: EndpointDescriptor):
    name = _require(endpoint.service_method_name, f"endpoint #{index} has no serviceMethodName")
    if "/" in name or "\\" in name or name in (".", ".."):
        raise ConfigurationError(f"endpoint #{index} serviceMethodName '{name}' is not a plain name")


def resolve_stack_config(
    descriptor: ApiDescriptor,
    base_dir,
    region: Optional[str] = None,
    account: Optional[str] = None,
) -> ResolvedStackConfig:
    """Validate ``descriptor`` and freeze everything the stack reads later."""
    stage = _require(descriptor.stage, "stage is required")
    product = _require(descriptor.product_short_name, "productShortName is required")
    if not descriptor.endpoints:
        raise ConfigurationError("at least one endpoint is required")
    for index, endpoint in enumerate(descriptor.endpoints):
        _validate_endpoint(index, endpoint)

    authorization = resolve_authorization(descriptor, base_dir)
    mapping_domain = resolve_domain_mapping(descriptor)

    return ResolvedStackConfig(
        product_short_name=product.lower(),
        org_short_name=lower_name(descriptor.org_short_name),
        stage=stage,
        gateway_name=descriptor.gateway_name,
        endpoints=descriptor.endpoints,
        authorization=authorization,
        base_dir=Path(base_dir),
        cors_config=descriptor.cors_config,
        mapping_domain=mapping_domain,
        certificate_arn=descriptor.certificate_arn,
        region=region,
        account=account,
    )


def resolve_tables(config: ResolvedStackConfig, naming: Callable = generate_resource_name) -> ResolvedTables:
    names = {}
    for key in resolve_naming_keys(config):
        table_name = name_for(key, naming)
        if not table_name:
            raise ResourceNotFoundError(key.resource_constant.value)
        names[key.resource_constant] = table_name
    logger.debug("resolved table names: %s", {k.value: v for k, v in names.items()})
    return ResolvedTables(names=names)


def resolve_authorizer_environment(tables: ResolvedTables, stage: str) -> Mapping[str, str]:
    return {
        "USERS_POLICY_TABLE_NAME": tables.users_policy,
        "USERS_TABLE_NAME": tables.users,
        "stage": stage,
        "PRODUCTS_TABLE_NAME": tables.products,
        "USER_POOL_TABLE_NAME": tables.user_pool,
    }


def resolve_endpoint_environment(
    config: ResolvedStackConfig, endpoint: EndpointDescriptor, tables: ResolvedTables
) -> Mapping[str, str]:
    # same values for every endpoint of the stack
    return {
        "STAGE": config.stage,
        "DEFAULT_DYNAMODB_TABLE_NAME": tables.products,
        "GLOBAL_COUNTER_TABLE_NAME": tables.global_counter,
    }


def resolve_grants(tables: ResolvedTables, authorization_required: bool) -> GrantPlan:
    authorizer_grants = ()
    if authorization_required:
        authorizer_grants = tuple(Grant(constant, tables[constant]) for constant in AUTHORIZER_TABLES)
    endpoint_grants = tuple(Grant(constant, tables[constant]) for constant in ENDPOINT_TABLES)
    return GrantPlan(authorizer_grants=authorizer_grants, endpoint_grants=endpoint_grants)


def locate_compute_unit(endpoint: EndpointDescriptor, base_dir) -> Path:
    return Path(base_dir) / "lambda" / endpoint.service_method_name / "src" / "index"


def bind_api(
    descriptor: ApiDescriptor,
    base_dir,
    naming: Callable = generate_resource_name,
    region: Optional[str] = None,
    account: Optional[str] = None,
) -> ApiBinding:
    config = resolve_stack_config(descriptor, base_dir, region=region, account=account)
    return bind_config(config, naming)


def bind_config(config: ResolvedStackConfig, naming: Callable = generate_resource_name) -> ApiBinding:
    """Derive tables, grants and per-endpoint bindings from a validated config."""
    tables = resolve_tables(config, naming)
    grants = resolve_grants(tables, config.is_authorization_exists)

    authorizer = None
    authorizer_environment = {}
    if config.is_authorization_exists:
        authorizer_environment = resolve_authorizer_environment(tables, config.stage)
        authorizer = AuthorizerBinding(
            unit_path=config.authorization.unit_path,
            environment=authorizer_environment,
            grants=grants.authorizer_grants,
        )

    endpoints = []
    for endpoint in config.endpoints:
        gated = authorizer is not None and not endpoint.disable_authorizer
        endpoints.append(
            EndpointBinding(
                endpoint=endpoint,
                compute_unit=locate_compute_unit(endpoint, config.base_dir),
                environment=resolve_endpoint_environment(config, endpoint, tables),
                grants=grants.endpoint_grants,
                authorizer_environment=dict(authorizer_environment) if gated else {},
            )
        )

    logger.debug(
        "bound %d endpoint(s) for %s (authorizer=%s)",
        len(endpoints),
        config.gateway_name,
        authorizer is not None,
    )
    return ApiBinding(
        config=config,
        tables=tables,
        grants=grants,
        endpoints=tuple(endpoints),
        authorizer=authorizer,
    )
