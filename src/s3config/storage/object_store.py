from __future__ import annotations

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from s3config.errors import ObjectNotFound, ReadError
from s3config.logging_config import get_logger


logger = get_logger(__name__)

MISSING_OBJECT_CODES = {"404", "NoSuchKey", "NotFound", "NoSuchBucket"}


class ObjectStore:
    def __init__(self, session: boto3.Session, endpoint: str | None = None):
        self.endpoint = endpoint
        self.region = session.region_name
        client_kwargs = {"config": Config(signature_version="s3v4")}
        if self.endpoint:
            client_kwargs["endpoint_url"] = self.endpoint
        self.client = session.client("s3", **client_kwargs)

    def fetch_object(self, bucket: str, key: str) -> bytes:
        """
        Read a whole object into memory.
        Raises ObjectNotFound if the object cannot be fetched (missing, denied,
        bad credentials, transport failure) and ReadError if its body breaks
        off mid-read.
        """
        try:
            response = self.client.get_object(Bucket=bucket, Key=key)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            missing = code in MISSING_OBJECT_CODES
            logger.debug("Object fetch failed: bucket=%s key=%s code=%s missing=%s", bucket, key, code, missing)
            raise ObjectNotFound(bucket, key, e, missing=missing) from e
        except BotoCoreError as e:
            raise ObjectNotFound(bucket, key, e, missing=False) from e

        body = response["Body"]
        try:
            return body.read()
        except (BotoCoreError, OSError) as e:
            raise ReadError(bucket, key, e) from e
        finally:
            body.close()
