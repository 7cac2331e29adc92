"""
DynamoDB Key-Value Store
========================

Key-value capability over an AWS DynamoDB table.

Table Layout:
    - Partition key: name (S)
    - Sort key: version (S)
    - Attributes: key (S), contents (S), hmac (S, or B holding hex text)

The boto3 low-level client is created once by the caller and reused.
Service errors other than the conditional-insert failure propagate
unchanged as botocore ClientError.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Final, Iterator, List, Optional, Tuple

from botocore.exceptions import ClientError

from credvault.core.errors import ConditionalCheckFailedError
from credvault.db.base import KeyValueStore, SecretRecord

_CONDITIONAL_CHECK_FAILED: Final[str] = "ConditionalCheckFailedException"
_RESOURCE_IN_USE: Final[str] = "ResourceInUseException"

# "name" is a DynamoDB reserved word
_NAME_ALIAS: Final[Dict[str, str]] = {"#name": "name"}


def _error_code(error: ClientError) -> Optional[str]:
    return error.response.get("Error", {}).get("Code")


def _to_record(item: Dict[str, Any]) -> SecretRecord:
    hmac_attr = item["hmac"]
    hmac_value = hmac_attr["B"] if "B" in hmac_attr else hmac_attr["S"]
    return SecretRecord(
        name=item["name"]["S"],
        version=item["version"]["S"],
        key=item["key"]["S"],
        contents=item["contents"]["S"],
        hmac=hmac_value,
    )


class DynamoDBKeyValueStore(KeyValueStore):
    """
    DynamoDB-backed key-value capability.

    Usage:
        store = DynamoDBKeyValueStore(boto3.client("dynamodb"), "credential-store")
        store.create_table()
    """

    __slots__ = ("_client", "_table", "_log")

    def __init__(self, client: Any, table: str) -> None:
        self._client = client
        self._table = table
        self._log = logging.getLogger("credvault.db")

    @property
    def table(self) -> str:
        return self._table

    def get_item(self, name: str, version: str) -> Optional[SecretRecord]:
        resp = self._client.get_item(
            TableName=self._table,
            Key={"name": {"S": name}, "version": {"S": version}},
            ConsistentRead=True,
        )
        item = resp.get("Item")
        if not item:
            return None
        return _to_record(item)

    def put_item_if_absent(self, record: SecretRecord) -> None:
        hmac_attr = (
            {"B": record.hmac} if isinstance(record.hmac, bytes) else {"S": record.hmac}
        )
        try:
            self._client.put_item(
                TableName=self._table,
                Item={
                    "name": {"S": record.name},
                    "version": {"S": record.version},
                    "key": {"S": record.key},
                    "contents": {"S": record.contents},
                    "hmac": hmac_attr,
                },
                ConditionExpression="attribute_not_exists(#name)",
                ExpressionAttributeNames=_NAME_ALIAS,
            )
        except ClientError as e:
            if _error_code(e) == _CONDITIONAL_CHECK_FAILED:
                raise ConditionalCheckFailedError(str(e)) from e
            raise

    def delete_item(self, name: str, version: str) -> None:
        self._client.delete_item(
            TableName=self._table,
            Key={"name": {"S": name}, "version": {"S": version}},
        )

    def query(
        self,
        name: str,
        descending: bool = True,
        limit: Optional[int] = None,
        consistent: bool = True,
    ) -> List[SecretRecord]:
        params: Dict[str, Any] = {
            "TableName": self._table,
            "ConsistentRead": consistent,
            "ScanIndexForward": not descending,
            "KeyConditionExpression": "#name = :name",
            "ExpressionAttributeNames": _NAME_ALIAS,
            "ExpressionAttributeValues": {":name": {"S": name}},
        }
        if limit is not None:
            params["Limit"] = limit

        records: List[SecretRecord] = []
        while True:
            resp = self._client.query(**params)
            records.extend(_to_record(item) for item in resp.get("Items", []))
            last_key = resp.get("LastEvaluatedKey")
            if not last_key or (limit is not None and len(records) >= limit):
                break
            params["ExclusiveStartKey"] = last_key

        if limit is not None:
            records = records[:limit]
        return records

    def scan_keys(self) -> Iterator[Tuple[str, str]]:
        params: Dict[str, Any] = {
            "TableName": self._table,
            "ProjectionExpression": "#name, version",
            "ExpressionAttributeNames": _NAME_ALIAS,
        }
        while True:
            resp = self._client.scan(**params)
            for item in resp.get("Items", []):
                yield item["name"]["S"], item["version"]["S"]
            last_key = resp.get("LastEvaluatedKey")
            if not last_key:
                return
            params["ExclusiveStartKey"] = last_key

    def create_table(self, wait: bool = True) -> bool:
        """
        Create the credential table.

        Returns:
            True if created, False if it already existed
        """
        try:
            self._client.create_table(
                TableName=self._table,
                KeySchema=[
                    {"AttributeName": "name", "KeyType": "HASH"},
                    {"AttributeName": "version", "KeyType": "RANGE"},
                ],
                AttributeDefinitions=[
                    {"AttributeName": "name", "AttributeType": "S"},
                    {"AttributeName": "version", "AttributeType": "S"},
                ],
                BillingMode="PAY_PER_REQUEST",
            )
        except ClientError as e:
            if _error_code(e) == _RESOURCE_IN_USE:
                self._log.info("Table %s already exists", self._table)
                return False
            raise

        self._log.info("Creating table %s", self._table)
        if wait:
            self._client.get_waiter("table_exists").wait(TableName=self._table)
        return True

    def __repr__(self) -> str:
        return f"DynamoDBKeyValueStore(table={self._table!r})"
