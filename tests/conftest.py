import copy

import pytest

BASE_DESCRIPTOR = {
    "productShortName": "Shop",
    "orgShortName": "Acme",
    "stage": "prod",
    "serverUrl": "example.com",
    "serverUrlSubDomain": "api",
    "cors": {"allowOrigins": ["https://example.com"]},
    "features": {"Authorization": {"path": "./auth"}},
    "endpointsInfoArray": [
        {"serviceMethodName": "getUser", "resourceName": "users", "path": "/users/{userId}"},
        {"serviceMethodName": "listUsers", "resourceName": "users", "path": "/users"},
    ],
}


@pytest.fixture
def descriptor_data():
    return copy.deepcopy(BASE_DESCRIPTOR)


@pytest.fixture
def input_data(descriptor_data):
    return {"users": {"UsersApi": descriptor_data}}


@pytest.fixture
def base_dir(tmp_path):
    (tmp_path / "auth").mkdir()
    (tmp_path / "auth" / "index.py").write_text("def handler(event, context):\n    return {}\n")
    for name in ("getUser", "listUsers"):
        src = tmp_path / "lambda" / name / "src"
        src.mkdir(parents=True)
        (src / "index.py").write_text("def handler(event, context):\n    return {}\n")
    return tmp_path
