import logging

import boto3
from botocore.exceptions import ClientError

from api_gen.binder import ResolvedTables
from api_gen.errors import ResourceNotFoundError

logger = logging.getLogger(__name__)


def verify_tables_exist(tables: ResolvedTables, client=None, region=None):
    """Check every named table with DescribeTable before synthesizing lookups."""
    client = client or boto3.client("dynamodb", region_name=region)

    for constant, table_name in tables.names.items():
        try:
            client.describe_table(TableName=table_name)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "ResourceNotFoundException":
                raise ResourceNotFoundError(constant.value, table_name) from e
            raise
        logger.debug("table %s exists", table_name)
