"""
Appliance Energy Exceptions.

Partition failures are captured into PartitionResult objects and only
surface as exceptions under the strict aggregation policy.
"""

from typing import Any, Optional


class ApplianceDataError(Exception):
    """Base exception for all appliance data errors."""

    def __init__(
        self,
        message: str,
        partition_id: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.partition_id = partition_id
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message} (caused by: {self.original_error})"
        return self.message


class PartitionFetchError(ApplianceDataError):
    """
    Request against one partition failed.

    status_code is None for transport failures (connection, timeout).
    """

    def __init__(
        self,
        message: str,
        partition_id: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        request_url: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(message, partition_id, original_error)
        self.status_code = status_code
        self.response_body = response_body
        self.request_url = request_url

    def is_rate_limited(self) -> bool:
        return self.status_code == 429

    def is_server_error(self) -> bool:
        return self.status_code is not None and 500 <= self.status_code < 600

    def to_dict(self) -> dict[str, Any]:
        """Partition outcome detail for logs and summaries."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "partition_id": self.partition_id,
            "status_code": self.status_code,
            "request_url": self.request_url,
            "response_body": self.response_body,
            "original_error": str(self.original_error) if self.original_error else None,
        }

    def __str__(self) -> str:
        text = super().__str__()
        if self.request_url:
            text = f"{text} [GET {self.request_url}]"
        return text


class PartitionDecodeError(PartitionFetchError):
    """Response body is not a JSON array of row objects."""


class RateLimitError(PartitionFetchError):
    """HTTP 429 from the partition endpoint."""

    def __init__(
        self,
        message: str,
        partition_id: Optional[str] = None,
        retry_after_seconds: Optional[int] = None,
        request_url: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            partition_id,
            status_code=429,
            request_url=request_url,
        )
        self.retry_after_seconds = retry_after_seconds


class PartitionAggregationError(ApplianceDataError):
    """One or more partitions failed under the strict aggregation policy."""

    def __init__(
        self,
        message: str,
        failed_partitions: Optional[dict[str, PartitionFetchError]] = None,
    ) -> None:
        super().__init__(message)
        self.failed_partitions = failed_partitions or {}

    def __str__(self) -> str:
        failed = ", ".join(sorted(self.failed_partitions))
        return f"{self.message}: {failed}" if failed else self.message


class ConfigurationError(ApplianceDataError):
    """Invalid taxonomy or runtime configuration."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(message, original_error=original_error)
        self.config_key = config_key


class UnknownCategoryError(ApplianceDataError):
    """Category id is not present in the taxonomy."""

    def __init__(
        self,
        category_id: str,
        known_categories: Optional[list[str]] = None,
    ) -> None:
        super().__init__(f"Unknown appliance category: {category_id!r}")
        self.category_id = category_id
        self.known_categories = known_categories or []
