"""Tests for the AWS capabilities (DynamoDB store, KMS) with mocked clients."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from credvault.core.crypto.kms import AwsKeyManagement
from credvault.core.errors import ConditionalCheckFailedError, InvalidCiphertextError
from credvault.db.base import SecretRecord
from credvault.db.dynamodb import DynamoDBKeyValueStore


def _client_error(code: str, operation: str = "Op") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "boom"}}, operation)


def _item(name="x", version="0000000000000000001", hmac=None):
    return {
        "name": {"S": name},
        "version": {"S": version},
        "key": {"S": "a2V5"},
        "contents": {"S": "Y3Q="},
        "hmac": hmac or {"S": "00ab"},
    }


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def table(client):
    return DynamoDBKeyValueStore(client, "credential-store")


class TestDynamoDBGetItem:
    def test_found(self, table, client):
        client.get_item.return_value = {"Item": _item()}
        record = table.get_item("x", "0000000000000000001")
        assert record == SecretRecord("x", "0000000000000000001", "a2V5", "Y3Q=", "00ab")
        client.get_item.assert_called_once_with(
            TableName="credential-store",
            Key={"name": {"S": "x"}, "version": {"S": "0000000000000000001"}},
            ConsistentRead=True,
        )

    def test_missing(self, table, client):
        client.get_item.return_value = {}
        assert table.get_item("x", "1") is None

    def test_binary_hmac_attribute(self, table, client):
        client.get_item.return_value = {"Item": _item(hmac={"B": b"00ab"})}
        assert table.get_item("x", "1").hmac == b"00ab"


class TestDynamoDBPut:
    def test_conditional_insert(self, table, client):
        table.put_item_if_absent(SecretRecord("x", "1", "k", "c", "00"))
        kwargs = client.put_item.call_args.kwargs
        assert kwargs["ConditionExpression"] == "attribute_not_exists(#name)"
        assert kwargs["ExpressionAttributeNames"] == {"#name": "name"}
        assert kwargs["Item"]["hmac"] == {"S": "00"}

    def test_conditional_failure_typed(self, table, client):
        client.put_item.side_effect = _client_error("ConditionalCheckFailedException", "PutItem")
        with pytest.raises(ConditionalCheckFailedError):
            table.put_item_if_absent(SecretRecord("x", "1", "k", "c", "00"))

    def test_other_errors_pass_through(self, table, client):
        client.put_item.side_effect = _client_error("ProvisionedThroughputExceededException")
        with pytest.raises(ClientError):
            table.put_item_if_absent(SecretRecord("x", "1", "k", "c", "00"))


class TestDynamoDBQuery:
    def test_latest(self, table, client):
        client.query.return_value = {"Items": [_item(version="0000000000000000003")],
                                     "LastEvaluatedKey": {"name": {"S": "x"}}}
        records = table.query("x", limit=1)
        assert [r.version for r in records] == ["0000000000000000003"]
        kwargs = client.query.call_args.kwargs
        assert kwargs["ScanIndexForward"] is False
        assert kwargs["Limit"] == 1
        assert kwargs["ConsistentRead"] is True
        assert client.query.call_count == 1

    def test_paginates_without_limit(self, table, client):
        client.query.side_effect = [
            {"Items": [_item(version="1")], "LastEvaluatedKey": {"k": "v"}},
            {"Items": [_item(version="2")]},
        ]
        records = table.query("x", descending=False)
        assert [r.version for r in records] == ["1", "2"]
        assert client.query.call_args_list[1].kwargs["ExclusiveStartKey"] == {"k": "v"}


class TestDynamoDBScan:
    def test_paginates_to_end(self, table, client):
        client.scan.side_effect = [
            {"Items": [{"name": {"S": "a"}, "version": {"S": "1"}}], "LastEvaluatedKey": {"k": "v"}},
            {"Items": [{"name": {"S": "b"}, "version": {"S": "1"}}]},
        ]
        assert list(table.scan_keys()) == [("a", "1"), ("b", "1")]
        assert client.scan.call_args_list[0].kwargs["ProjectionExpression"] == "#name, version"


class TestDynamoDBDeleteAndSetup:
    def test_delete(self, table, client):
        table.delete_item("x", "1")
        client.delete_item.assert_called_once_with(
            TableName="credential-store",
            Key={"name": {"S": "x"}, "version": {"S": "1"}},
        )

    def test_create_table(self, table, client):
        assert table.create_table() is True
        kwargs = client.create_table.call_args.kwargs
        assert kwargs["KeySchema"][0] == {"AttributeName": "name", "KeyType": "HASH"}
        assert kwargs["KeySchema"][1] == {"AttributeName": "version", "KeyType": "RANGE"}
        client.get_waiter.assert_called_once_with("table_exists")

    def test_create_existing_table(self, table, client):
        client.create_table.side_effect = _client_error("ResourceInUseException", "CreateTable")
        assert table.create_table() is False


class TestAwsKeyManagement:
    def test_generate(self, client):
        client.generate_data_key.return_value = {"Plaintext": b"p" * 64, "CiphertextBlob": b"wrapped"}
        kms = AwsKeyManagement(client)
        assert kms.generate_data_key("alias/credstash", {"a": "1"}, 64) == (b"p" * 64, b"wrapped")
        client.generate_data_key.assert_called_once_with(
            KeyId="alias/credstash", NumberOfBytes=64, EncryptionContext={"a": "1"}
        )

    def test_no_context_omitted(self, client):
        client.decrypt.return_value = {"Plaintext": b"p"}
        AwsKeyManagement(client).decrypt(b"wrapped", None)
        client.decrypt.assert_called_once_with(CiphertextBlob=b"wrapped")

    def test_invalid_ciphertext_typed(self, client):
        client.decrypt.side_effect = _client_error("InvalidCiphertextException", "Decrypt")
        with pytest.raises(InvalidCiphertextError):
            AwsKeyManagement(client).decrypt(b"wrapped", {"a": "1"})

    def test_other_errors_pass_through(self, client):
        client.decrypt.side_effect = _client_error("AccessDeniedException", "Decrypt")
        with pytest.raises(ClientError):
            AwsKeyManagement(client).decrypt(b"wrapped", None)
