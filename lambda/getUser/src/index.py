import json
import os
import boto3

dynamodb = boto3.resource("dynamodb")
table = dynamodb.Table(os.environ["DEFAULT_DYNAMODB_TABLE_NAME"])


def _response(status, body):
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body, default=str),
    }


def handler(event, context):
    params = event.get("pathParameters") or {}
    user_id = params.get("userId")
    if not user_id:
        return _response(400, {"error": "userId is required"})

    item = table.get_item(Key={"id": user_id}).get("Item")
    if not item:
        return _response(404, {"error": "not found"})
    return _response(200, item)
