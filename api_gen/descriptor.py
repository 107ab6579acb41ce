"""Input models for one API description.

Wire names are camelCase; the models accept either the wire name or the
field name. Any validation failure surfaces as ConfigurationError.
"""
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import AliasChoices, BaseModel, Field, StrictStr, ValidationError, field_validator

from api_gen.errors import ConfigurationError

AUTHORIZATION_FEATURE = "Authorization"

MODEL_CONFIG = {
    "populate_by_name": True,
    "frozen": True,
    "extra": "ignore",
}


class AuthorizationFeature(BaseModel):
    path: Optional[StrictStr] = None

    model_config = MODEL_CONFIG


class EndpointDescriptor(BaseModel):
    service_method_name: Optional[StrictStr] = Field(default=None, alias="serviceMethodName")
    resource_name: Optional[StrictStr] = Field(default=None, alias="resourceName")
    disable_authorizer: bool = Field(default=False, alias="disableAuthorizer")
    path: Optional[StrictStr] = None
    method: StrictStr = "GET"

    model_config = MODEL_CONFIG

    @field_validator("method")
    @classmethod
    def _upper_method(cls, value: str) -> str:
        return value.upper()

    @property
    def route_path(self) -> str:
        if self.path:
            return self.path if self.path.startswith("/") else f"/{self.path}"
        return f"/{self.resource_name or self.service_method_name}"


class ApiDescriptor(BaseModel):
    product_short_name: Optional[StrictStr] = Field(default=None, alias="productShortName")
    stage: Optional[StrictStr] = None
    endpoints: Tuple[EndpointDescriptor, ...] = Field(
        default=(),
        validation_alias=AliasChoices("endpointsInfoArray", "endpoints"),
    )
    org_short_name: Optional[StrictStr] = Field(default=None, alias="orgShortName")
    cors_config: Any = Field(default=None, alias="cors")
    server_url: Optional[StrictStr] = Field(default=None, alias="serverUrl")
    server_url_sub_domain: Optional[StrictStr] = Field(default=None, alias="serverUrlSubDomain")
    certificate_arn: Optional[StrictStr] = Field(default=None, alias="certificateArn")
    features: Dict[str, Any] = Field(default_factory=dict)
    gateway_name: Optional[StrictStr] = None

    model_config = MODEL_CONFIG

    @field_validator("endpoints", mode="before")
    @classmethod
    def _default_endpoints(cls, value):
        return () if value is None else value

    @field_validator("features", mode="before")
    @classmethod
    def _parse_features(cls, value):
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise ValueError("features must be a mapping")

        features = dict(value)
        authorization = features.pop(AUTHORIZATION_FEATURE, None)
        # only an explicit null/false switches the feature off; {} still enables it
        if authorization is None or authorization is False:
            return features
        if authorization is True:
            features[AUTHORIZATION_FEATURE] = AuthorizationFeature()
        else:
            features[AUTHORIZATION_FEATURE] = AuthorizationFeature.model_validate(authorization)
        return features

    @property
    def authorization(self) -> Optional[AuthorizationFeature]:
        return self.features.get(AUTHORIZATION_FEATURE)


def _validate(model, data):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"invalid {model.__name__}: {e}") from e


def _single_entry(mapping, level):
    if not isinstance(mapping, Mapping):
        raise ConfigurationError(f"{level} must be a mapping, got {type(mapping).__name__}")
    if len(mapping) != 1:
        raise ConfigurationError(
            f"expected exactly one {level} entry, found {len(mapping)}: {sorted(mapping)}"
        )
    return next(iter(mapping.items()))


def parse_endpoint(data: Mapping[str, Any]) -> EndpointDescriptor:
    return _validate(EndpointDescriptor, data)


def parse_api_descriptor(data: Mapping[str, Any], gateway_name: Optional[str] = None) -> ApiDescriptor:
    descriptor = _validate(ApiDescriptor, data)
    if gateway_name is not None:
        descriptor = descriptor.model_copy(update={"gateway_name": gateway_name})
    return descriptor


def parse_input_data(input_data: Mapping[str, Any]) -> ApiDescriptor:
    """Parse ``{group: {gateway: descriptor}}``; exactly one of each is allowed."""
    _, gateway_group = _single_entry(input_data, "gateway group")
    gateway_name, descriptor = _single_entry(gateway_group, "API gateway")
    return parse_api_descriptor(descriptor, gateway_name=gateway_name)
