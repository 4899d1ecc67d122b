from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from budget_oracle.db.storage import KeyValueStore, StorageError, StorageQuotaExceeded

# Item size (400 KB) and capacity errors map to StorageQuotaExceeded
_QUOTA_ERROR_CODES = {"ItemCollectionSizeLimitExceededException", "ProvisionedThroughputExceededException"}


class DynamoKeyValueStore(KeyValueStore):
    """
    Stores each blob as one item: partition key ``storage_key``, payload in ``value``.
    The table must be created beforehand with ``storage_key`` (S) as its hash key.
    """

    def __init__(self, table_name: str, region_name: str = "eu-west-1", table=None) -> None:
        self.table_name = table_name
        if table is None:
            dynamodb = boto3.resource("dynamodb", region_name=region_name)
            table = dynamodb.Table(table_name)
        self._table = table

    def get(self, key: str) -> Optional[str]:
        try:
            response = self._table.get_item(Key={"storage_key": key})
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"get_item failed for {key!r}: {_error_message(e)}") from e
        item = response.get("Item")
        if not item:
            return None
        value = item.get("value")
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        try:
            self._table.put_item(Item={"storage_key": key, "value": value})
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            message = _error_message(e)
            if code in _QUOTA_ERROR_CODES or "size has exceeded" in message:
                raise StorageQuotaExceeded(f"put_item rejected for {key!r}: {message}") from e
            raise StorageError(f"put_item failed for {key!r}: {message}") from e
        except BotoCoreError as e:
            raise StorageError(f"put_item failed for {key!r}: {e}") from e

    def ping(self) -> bool:
        try:
            self._table.load()
            return True
        except (ClientError, BotoCoreError):
            return False


def _error_message(error: Exception) -> str:
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Message", str(error))
    return str(error)
