import logging
import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)


def get_table(table_name: str, region: str = "us-east-1"):
    dynamodb = boto3.resource("dynamodb", region_name=region)
    return dynamodb.Table(table_name)


def scan_all(table_name: str, region: str = "us-east-1", filter_expression=None) -> list[dict]:
    """
    Scan and return all records, optionally narrowed by a filter expression.
    Follows LastEvaluatedKey until the table is exhausted.
    """
    table = get_table(table_name, region)
    kwargs = {}
    if filter_expression is not None:
        kwargs["FilterExpression"] = filter_expression

    try:
        response = table.scan(**kwargs)
        items = response.get("Items", [])

        while "LastEvaluatedKey" in response:
            response = table.scan(ExclusiveStartKey=response["LastEvaluatedKey"], **kwargs)
            items.extend(response.get("Items", []))

        logger.info("DynamoDB scan returned %d records | table=%s", len(items), table_name)
        return items
    except ClientError as e:
        logger.error(
            "DynamoDB scan failed | table=%s | error=%s",
            table_name,
            e.response["Error"]["Message"],
        )
        raise


def scan_where(table_name: str, field: str, value, region: str = "us-east-1") -> list[dict]:
    """Scan for records whose `field` equals `value`."""
    return scan_all(table_name, region, filter_expression=Attr(field).eq(value))


def get_item(table_name: str, item_id: str, region: str = "us-east-1") -> dict | None:
    """
    Fetch a single record by id.
    Returns None if not found.
    """
    table = get_table(table_name, region)
    try:
        response = table.get_item(Key={"id": item_id})
        item = response.get("Item")
        if item:
            logger.info("DynamoDB get success | table=%s | id=%s", table_name, item_id)
        else:
            logger.warning("DynamoDB get, item not found | table=%s | id=%s", table_name, item_id)
        return item
    except ClientError as e:
        logger.error(
            "DynamoDB get failed | table=%s | id=%s | error=%s",
            table_name,
            item_id,
            e.response["Error"]["Message"],
        )
        raise


def update_fields(table_name: str, item_id: str, fields: dict, region: str = "us-east-1") -> None:
    """
    Set one or more attributes on an existing record.
    Raises ValueError if the record does not exist.
    """
    table = get_table(table_name, region)

    names = {f"#f{i}": name for i, name in enumerate(fields)}
    values = {f":v{i}": value for i, value in enumerate(fields.values())}
    assignments = ", ".join(f"#f{i} = :v{i}" for i in range(len(fields)))

    try:
        table.update_item(
            Key={"id": item_id},
            UpdateExpression=f"SET {assignments}",
            ExpressionAttributeNames=names,
            ExpressionAttributeValues=values,
            ConditionExpression="attribute_exists(id)",
        )
        logger.info(
            "DynamoDB update success | table=%s | id=%s | fields=%s",
            table_name,
            item_id,
            sorted(fields),
        )
    except ClientError as e:
        error_code = e.response["Error"]["Code"]
        if error_code == "ConditionalCheckFailedException":
            logger.error("DynamoDB update failed, id not found | table=%s | id=%s", table_name, item_id)
            raise ValueError(f"Record {item_id} not found in {table_name}.")
        logger.error(
            "DynamoDB update failed | table=%s | id=%s | error=%s",
            table_name,
            item_id,
            e.response["Error"]["Message"],
        )
        raise
