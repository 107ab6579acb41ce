import json
import os
import boto3

MAX_ITEMS = 100

dynamodb = boto3.resource("dynamodb")
table = dynamodb.Table(os.environ["DEFAULT_DYNAMODB_TABLE_NAME"])
counter_table = dynamodb.Table(os.environ["GLOBAL_COUNTER_TABLE_NAME"])


def handler(event, context):
    resp = table.scan(Limit=MAX_ITEMS)
    counter = counter_table.get_item(Key={"id": "users"}).get("Item") or {}

    return {
        "statusCode": 200,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(
            {
                "stage": os.environ.get("STAGE"),
                "items": resp.get("Items", []),
                "total": counter.get("value", 0),
            },
            default=str,
        ),
    }
