from __future__ import annotations


class S3ConfigError(Exception):
    """Base class for every error raised by s3config."""


class BindError(S3ConfigError):
    """Raised synchronously by bind(); the session is never created."""


class ValidationError(BindError, ValueError):
    pass


class MissingRegion(ValidationError):
    pass


class MissingCredentials(ValidationError):
    pass


class MissingLocation(ValidationError):
    pass


class UnknownAuthMode(ValidationError):
    def __init__(self, auth_mode: object) -> None:
        super().__init__(f"Unknown auth mode: {auth_mode!r}")
        self.auth_mode = auth_mode


class FetchError(BindError, RuntimeError):
    def __init__(self, message: str, bucket: str, key: str) -> None:
        super().__init__(message)
        self.bucket = bucket
        self.key = key


class ObjectNotFound(FetchError):
    """The object could not be fetched.

    ``missing`` is True when the store said the bucket or key does not exist,
    False for denied access, bad credentials or transport failures.
    """

    def __init__(self, bucket: str, key: str, cause: Exception | None = None, missing: bool = True) -> None:
        detail = f" {cause}" if cause is not None else ""
        what = "file not found" if missing else "file not accessible"
        super().__init__(f"{what} [{bucket}/{key}{detail}]", bucket, key)
        self.missing = missing


class ReadError(FetchError):
    def __init__(self, bucket: str, key: str, cause: Exception | None = None) -> None:
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"file error data [{bucket}/{key}]{detail}", bucket, key)


class DecodeError(BindError, ValueError):
    pass


class UnsupportedTarget(BindError, TypeError):
    def __init__(self, target: object, cause: Exception) -> None:
        super().__init__(f"Cannot decode into {target!r}: {cause}")
        self.target = target


class MalformedPayload(DecodeError):
    """The payload is not YAML, or it does not fit the target shape.

    The raw bytes are kept on ``payload``; ``preview()`` renders a short,
    printable excerpt for log lines.
    """

    PREVIEW_LIMIT = 200

    def __init__(self, payload: bytes, reason: str) -> None:
        self.payload = payload
        self.reason = reason
        super().__init__(f"file not yaml ({reason}): {self.preview()}")

    def preview(self, limit: int | None = None) -> str:
        limit = limit or self.PREVIEW_LIMIT
        text = self.payload[:limit].decode("utf-8", errors="replace")
        if len(self.payload) > limit:
            text += f"... ({len(self.payload)} bytes)"
        return repr(text)
