"""Lock stores - conditional put and delete against a remote keyed store."""

from typing import Any

import boto3
import redis
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from src.lockrun.config import Settings

from .errors import LockContentionError, LockStoreError
from .locks import LockRecord, LockStore

logger = structlog.get_logger()


class DynamoDBLockStore:
    """Lock records as items in a DynamoDB table keyed by LockID."""

    KEY_ATTRIBUTE = "LockID"
    EXPIRY_ATTRIBUTE = "Ttl"

    def __init__(
        self,
        table_name: str,
        endpoint_url: str | None = None,
        region_name: str | None = None,
        table: Any | None = None,
    ):
        self.table_name = table_name
        self.endpoint_url = endpoint_url
        self.region_name = region_name
        self._table = table

    def _get_table(self, key: str):
        """Lazy DynamoDB table handle."""
        if self._table is None:
            try:
                dynamodb = boto3.resource(
                    "dynamodb",
                    endpoint_url=self.endpoint_url,
                    region_name=self.region_name,
                )
            except (BotoCoreError, ValueError) as e:
                raise LockStoreError(key, f"Could not create DynamoDB client: {e}") from e
            self._table = dynamodb.Table(self.table_name)
        return self._table

    def put_if_absent(self, record: LockRecord) -> None:
        table = self._get_table(record.key)
        try:
            table.put_item(
                Item={
                    self.KEY_ATTRIBUTE: record.key,
                    self.EXPIRY_ATTRIBUTE: record.expiry,
                },
                ConditionExpression=f"attribute_not_exists({self.KEY_ATTRIBUTE})",
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                raise LockContentionError(record.key) from e
            raise LockStoreError(record.key, f"Got error calling PutItem: {e}") from e
        except BotoCoreError as e:
            raise LockStoreError(record.key, f"Got error calling PutItem: {e}") from e

    def delete(self, key: str) -> None:
        table = self._get_table(key)
        try:
            table.delete_item(Key={self.KEY_ATTRIBUTE: key})
        except (BotoCoreError, ClientError) as e:
            raise LockStoreError(key, f"Got error calling DeleteItem: {e}") from e


class RedisLockStore:
    """Lock records as Redis string keys set with NX.

    The value is the expiry timestamp. No Redis TTL is applied, so a key
    stays until it is deleted.
    """

    def __init__(
        self,
        url: str,
        key_prefix: str = "lock:",
        client: redis.Redis | None = None,
    ):
        self.url = url
        self.key_prefix = key_prefix
        self.redis = client

    def _get_redis(self, key: str) -> redis.Redis:
        """Lazy Redis connection."""
        if self.redis is None:
            try:
                self.redis = redis.Redis.from_url(self.url)
            except ValueError as e:
                raise LockStoreError(key, f"Could not create Redis client: {e}") from e
        return self.redis

    def _lock_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def put_if_absent(self, record: LockRecord) -> None:
        r = self._get_redis(record.key)
        try:
            created = r.set(self._lock_key(record.key), record.expiry, nx=True)
        except redis.RedisError as e:
            raise LockStoreError(record.key, f"Got error calling SET: {e}") from e

        if not created:
            raise LockContentionError(record.key)

    def delete(self, key: str) -> None:
        r = self._get_redis(key)
        try:
            r.delete(self._lock_key(key))
        except redis.RedisError as e:
            raise LockStoreError(key, f"Got error calling DEL: {e}") from e


def build_store(settings: Settings) -> LockStore:
    """Create the store selected by settings.store_backend."""
    if settings.store_backend == "redis":
        logger.debug("Using Redis lock store", url=settings.redis_url)
        return RedisLockStore(settings.redis_url, settings.redis_key_prefix)

    logger.debug(
        "Using DynamoDB lock store",
        table=settings.dynamodb_table,
        endpoint=settings.dynamodb_endpoint,
    )
    return DynamoDBLockStore(
        settings.dynamodb_table,
        endpoint_url=settings.dynamodb_endpoint,
        region_name=settings.aws_region,
    )
