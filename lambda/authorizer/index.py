import json
import os
import boto3

dynamodb = boto3.resource("dynamodb")

USERS_TABLE_NAME = os.environ.get("USERS_TABLE_NAME")
USERS_POLICY_TABLE_NAME = os.environ.get("USERS_POLICY_TABLE_NAME")
STAGE = os.environ.get("stage")

if not USERS_TABLE_NAME or not USERS_POLICY_TABLE_NAME:
    raise RuntimeError("USERS_TABLE_NAME and USERS_POLICY_TABLE_NAME must be set")

users_table = dynamodb.Table(USERS_TABLE_NAME)
users_policy_table = dynamodb.Table(USERS_POLICY_TABLE_NAME)


def handler(event, context):
    print("Authorizer Event:", json.dumps({"methodArn": event.get("methodArn"), "stage": STAGE}))

    method_arn = event.get("methodArn", "*")
    token = (event.get("authorizationToken") or "").removeprefix("Bearer ").strip()

    if not token:
        return _policy("anonymous", "Deny", method_arn, reason="no_token")

    try:
        user = users_table.get_item(Key={"apiKey": token}).get("Item")
        if not user or user.get("status", "inactive") != "active":
            return _policy("anonymous", "Deny", method_arn, reason="unknown_or_inactive")

        user_id = user["userId"]
        policy = users_policy_table.get_item(Key={"userId": user_id}).get("Item") or {}
        allowed = policy.get("allowedResources") or []

        # an empty policy grants the whole API
        if allowed and not any(method_arn.endswith(resource) for resource in allowed):
            return _policy(user_id, "Deny", method_arn, reason="not_allowed")

        return _policy(user_id, "Allow", method_arn, userId=user_id)

    except Exception as e:
        print(json.dumps({"error": str(e), "source": "api_authorizer"}))
        return _policy("anonymous", "Deny", method_arn, reason="error")


def _policy(principal_id, effect, resource, **context):
    return {
        "principalId": principal_id,
        "policyDocument": {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Action": "execute-api:Invoke",
                    "Effect": effect,
                    "Resource": resource,
                }
            ],
        },
        "context": context,
    }
