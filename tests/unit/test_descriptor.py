import pytest
from pydantic import ValidationError

from api_gen.descriptor import (
    AuthorizationFeature,
    EndpointDescriptor,
    parse_api_descriptor,
    parse_endpoint,
    parse_input_data,
)
from api_gen.errors import ConfigurationError


def test_parse_input_data_reads_single_gateway(input_data):
    descriptor = parse_input_data(input_data)

    assert descriptor.gateway_name == "UsersApi"
    assert descriptor.product_short_name == "Shop"
    assert descriptor.stage == "prod"
    assert descriptor.authorization == AuthorizationFeature(path="./auth")
    assert [e.service_method_name for e in descriptor.endpoints] == ["getUser", "listUsers"]


def test_parse_input_data_does_not_mutate_input(input_data):
    before = repr(input_data)
    parse_input_data(input_data)
    assert repr(input_data) == before


@pytest.mark.parametrize(
    "data",
    [
        {},
        {"a": {"Api": {}}, "b": {"Api": {}}},
        {"a": {}},
        {"a": {"Api1": {}, "Api2": {}}},
    ],
)
def test_parse_input_data_requires_exactly_one_group_and_gateway(data):
    with pytest.raises(ConfigurationError):
        parse_input_data(data)


def test_parse_input_data_rejects_non_mapping():
    with pytest.raises(ConfigurationError):
        parse_input_data(["not", "a", "mapping"])


def test_parse_endpoint_defaults():
    endpoint = parse_endpoint({"serviceMethodName": "getUser", "resourceName": "users"})

    assert endpoint.disable_authorizer is False
    assert endpoint.method == "GET"
    assert endpoint.route_path == "/users"


def test_parse_endpoint_explicit_route():
    endpoint = parse_endpoint(
        {"serviceMethodName": "createUser", "path": "users", "method": "post", "disableAuthorizer": True}
    )

    assert endpoint.route_path == "/users"
    assert endpoint.method == "POST"
    assert endpoint.disable_authorizer is True


def test_authorization_feature_absent_or_disabled(descriptor_data):
    descriptor_data["features"] = {}
    assert parse_api_descriptor(descriptor_data).authorization is None

    descriptor_data["features"] = {"Authorization": False}
    assert parse_api_descriptor(descriptor_data).authorization is None


def test_endpoints_alias_is_accepted(descriptor_data):
    descriptor_data["endpoints"] = descriptor_data.pop("endpointsInfoArray")
    assert len(parse_api_descriptor(descriptor_data).endpoints) == 2


def test_endpoints_must_be_a_list(descriptor_data):
    descriptor_data["endpointsInfoArray"] = {"serviceMethodName": "getUser"}
    with pytest.raises(ConfigurationError):
        parse_api_descriptor(descriptor_data)


def test_empty_authorization_feature_is_enabled(descriptor_data):
    descriptor_data["features"] = {"Authorization": {}}
    assert parse_api_descriptor(descriptor_data).authorization == AuthorizationFeature(path=None)


@pytest.mark.parametrize("value,expected", [(False, False), ("false", False), ("true", True), (True, True)])
def test_disable_authorizer_is_parsed_as_boolean(value, expected):
    endpoint = parse_endpoint({"serviceMethodName": "getUser", "disableAuthorizer": value})
    assert endpoint.disable_authorizer is expected


def test_disable_authorizer_rejects_non_boolean():
    with pytest.raises(ConfigurationError):
        parse_endpoint({"serviceMethodName": "getUser", "disableAuthorizer": "sometimes"})


def test_non_string_product_short_name_is_rejected(descriptor_data):
    descriptor_data["productShortName"] = 123
    with pytest.raises(ConfigurationError, match="productShortName") as excinfo:
        parse_api_descriptor(descriptor_data)
    assert isinstance(excinfo.value.__cause__, ValidationError)


def test_descriptor_is_frozen(input_data):
    descriptor = parse_input_data(input_data)
    with pytest.raises(ValidationError):
        descriptor.stage = "dev"


def test_models_accept_field_names():
    endpoint = EndpointDescriptor(service_method_name="getUser", disable_authorizer=True)
    assert endpoint.service_method_name == "getUser"
    assert endpoint.disable_authorizer is True
