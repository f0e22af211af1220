"""Object store client for DigitalOcean Spaces and other S3-compatible stores."""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Iterator
from typing import Any, Callable, TypeVar

import boto3
from botocore.client import BaseClient
from botocore.config import Config as BotoConfig
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    HTTPClientError,
)
from botocore.exceptions import ConnectionError as BotoConnectionError

from .config import SpacesCredentials, config
from .exceptions import (
    SpacesAPIError,
    SpacesAuthenticationError,
    SpacesDeleteError,
    SpacesListError,
    SpacesNetworkError,
    SpacesNotFoundError,
    SpacesPermissionError,
    SpacesRateLimitError,
    SpacesUploadError,
)
from .models import ListObjectsPage, RemoteObject
from .utils import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_PAGE_SIZE,
    DEFAULT_RETRY_DELAY,
    guess_content_type,
    sha256_stream,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

NOT_FOUND_CODES = {"NoSuchKey", "NotFound", "NoSuchBucket", "404"}
AUTH_CODES = {"InvalidAccessKeyId", "SignatureDoesNotMatch", "InvalidToken"}
THROTTLE_CODES = {"SlowDown", "Throttling", "ThrottlingException", "TooManyRequests"}


class SpacesClient:
    """Client for a single bucket in an S3-compatible object store."""

    def __init__(
        self,
        credentials: SpacesCredentials | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        timeout: float = 60.0,
    ):
        """Initialize the client.

        Args:
            credentials: Bucket credentials (uses config if not provided)
            max_retries: Maximum number of retry attempts (default: 3)
            retry_delay: Initial delay between retries in seconds (default: 1.0)
            timeout: Connect/read timeout in seconds (default: 60.0)
        """
        self.credentials = credentials or config.credentials()
        self.bucket = self.credentials.name
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout
        self._client: BaseClient | None = None

    def _get_client(self) -> BaseClient:
        """Get or create the boto3 S3 client."""
        if self._client is None:
            self._client = boto3.client(
                "s3",
                endpoint_url=self.credentials.endpoint_url,
                region_name=self.credentials.region,
                aws_access_key_id=self.credentials.key,
                aws_secret_access_key=self.credentials.secret,
                config=BotoConfig(
                    connect_timeout=self.timeout,
                    read_timeout=self.timeout,
                    # Retries are handled by _call
                    retries={"max_attempts": 1, "mode": "standard"},
                ),
            )
        return self._client

    def close(self) -> None:
        """Close the underlying client and release connections."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> SpacesClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # =========================
    # Error handling and retries
    # =========================

    def _translate_client_error(self, e: ClientError) -> SpacesAPIError:
        """Map a botocore ClientError to a pyspaces exception."""
        error = e.response.get("Error", {})
        code = str(error.get("Code", ""))
        message = error.get("Message") or code or str(e)
        status = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0)

        if code in NOT_FOUND_CODES or status == 404:
            return SpacesNotFoundError(f"Not found: {message}")
        if code in AUTH_CODES or status == 401:
            return SpacesAuthenticationError(f"Invalid access key or secret: {message}")
        if code == "AccessDenied" or status == 403:
            return SpacesPermissionError(f"Access denied: {message}")
        if code in THROTTLE_CODES or status == 429:
            return SpacesRateLimitError(f"Rate limit exceeded: {message}")
        if status:
            return SpacesAPIError(f"Request failed with status {status}: {message}")
        return SpacesAPIError(f"Request failed: {message}")

    def _should_retry(self, exception: Exception, attempt: int) -> bool:
        """Determine if a request should be retried.

        Args:
            exception: The exception that occurred
            attempt: Current attempt number (0-based)

        Returns:
            True if the request should be retried, False otherwise
        """
        if attempt >= self.max_retries:
            return False

        if isinstance(exception, (SpacesNetworkError, SpacesRateLimitError)):
            return True

        if isinstance(exception, ClientError):
            status = exception.response.get("ResponseMetadata", {}).get(
                "HTTPStatusCode", 0
            )
            return 500 <= status < 600

        return False

    def _calculate_retry_delay(self, attempt: int) -> float:
        """Calculate delay before next retry using exponential backoff.

        Args:
            attempt: Current attempt number (0-based)

        Returns:
            Delay in seconds
        """
        base_delay = self.retry_delay * (2**attempt)
        # Add jitter: +/- 25% of base delay
        jitter = base_delay * 0.25 * (2 * random.random() - 1)
        return base_delay + jitter

    def _call(self, operation: str, func: Callable[[], T]) -> T:
        """Run a store operation with retry logic.

        Args:
            operation: Description used in log messages
            func: Callable performing the request

        Returns:
            Whatever func returns

        Raises:
            SpacesAPIError: If the request fails after all retries
        """
        last_exception: Exception | None = None

        for attempt in range(self.max_retries + 1):
            try:
                return func()
            except ClientError as e:
                error = self._translate_client_error(e)
                last_exception = error
                if self._should_retry(e, attempt) or self._should_retry(
                    error, attempt
                ):
                    delay = self._calculate_retry_delay(attempt)
                    logger.debug(
                        "%s failed (attempt %d/%d), retrying in %.1fs: %s",
                        operation,
                        attempt + 1,
                        self.max_retries + 1,
                        delay,
                        error,
                    )
                    time.sleep(delay)
                    continue
                raise error from e
            except (BotoConnectionError, HTTPClientError) as e:
                error = SpacesNetworkError(f"Network error: {e}")
                last_exception = error
                if self._should_retry(error, attempt):
                    delay = self._calculate_retry_delay(attempt)
                    logger.debug(
                        "%s failed (attempt %d/%d), retrying in %.1fs: %s",
                        operation,
                        attempt + 1,
                        self.max_retries + 1,
                        delay,
                        error,
                    )
                    time.sleep(delay)
                    continue
                raise error from e
            except BotoCoreError as e:
                raise SpacesAPIError(f"{operation} failed: {e}") from e

        # If we get here, we've exhausted all retries
        if last_exception:
            raise last_exception
        raise SpacesAPIError(f"{operation} failed after all retry attempts")

    # =========================
    # Listing
    # =========================

    def _fetch_listing(
        self, prefix: str, page_size: int, max_items: int | None
    ) -> list[dict[str, Any]]:
        """Fetch every page of a listing through the list_objects_v2 paginator."""
        paginator = self._get_client().get_paginator("list_objects_v2")
        pagination: dict[str, Any] = {"PageSize": page_size}
        if max_items:
            pagination["MaxItems"] = max_items
        kwargs: dict[str, Any] = {"Bucket": self.bucket, "PaginationConfig": pagination}
        if prefix:
            kwargs["Prefix"] = prefix
        return list(paginator.paginate(**kwargs))

    def iter_objects(
        self,
        prefix: str = "",
        page_size: int = DEFAULT_PAGE_SIZE,
        max_items: int | None = None,
    ) -> Iterator[list[RemoteObject]]:
        """Iterate over the bucket listing one page at a time.

        All pages are fetched before the first one is yielded, so a retried
        listing starts over instead of repeating pages.

        Args:
            prefix: Only list keys starting with this prefix
            page_size: Maximum keys per page
            max_items: Stop after this many keys (None for all)

        Yields:
            Lists of RemoteObject, directory markers included

        Raises:
            SpacesListError: If the store returns no listing
        """
        responses = self._call(
            f"List {self.bucket}",
            lambda: self._fetch_listing(prefix, page_size, max_items),
        )
        if not responses:
            raise SpacesListError(f"No listing returned for bucket {self.bucket}")

        for page_num, data in enumerate(responses, start=1):
            if not data or ("Contents" not in data and "KeyCount" not in data):
                raise SpacesListError(
                    f"No listing returned for bucket {self.bucket}"
                )

            page = ListObjectsPage.from_api_response(data)
            logger.debug(
                "Listed page %d of %s: %d object(s), more: %s",
                page_num,
                self.bucket,
                len(page.objects),
                page.is_truncated,
            )
            yield page.objects

    def list_objects(
        self, prefix: str = "", max_items: int | None = None
    ) -> list[RemoteObject]:
        """List every object in the bucket.

        Args:
            prefix: Only list keys starting with this prefix
            max_items: Stop after this many keys (None for all)

        Returns:
            All objects, directory markers included
        """
        objects: list[RemoteObject] = []
        for page in self.iter_objects(prefix=prefix, max_items=max_items):
            objects.extend(page)
        return objects

    # =========================
    # Object operations
    # =========================

    def get_object(self, key: str) -> bytes:
        """Download the full content of an object.

        Raises:
            SpacesNotFoundError: If the object does not exist
        """
        client = self._get_client()

        def _do_get() -> bytes:
            response = client.get_object(Bucket=self.bucket, Key=key)
            return response["Body"].read()

        return self._call(f"Get {key}", _do_get)

    def get_object_digest(self, key: str) -> str:
        """Stream an object through SHA-256 without buffering it.

        Raises:
            SpacesNotFoundError: If the object does not exist
        """
        client = self._get_client()

        def _do_digest() -> str:
            response = client.get_object(Bucket=self.bucket, Key=key)
            body = response["Body"]
            try:
                return sha256_stream(body)
            finally:
                body.close()

        return self._call(f"Get {key}", _do_digest)

    def put_object(
        self,
        key: str,
        body: bytes,
        public_read: bool = True,
        content_type: str | None = None,
    ) -> Any:
        """Upload content to a key, replacing any existing object.

        Args:
            key: Object key
            body: Object content
            public_read: Grant anonymous read access (ACL public-read)
            content_type: Content-Type header (guessed from key if not provided)

        Raises:
            SpacesUploadError: If the upload fails
        """
        client = self._get_client()
        kwargs: dict[str, Any] = {
            "Bucket": self.bucket,
            "Key": key,
            "Body": body,
            "ContentType": content_type or guess_content_type(key),
        }
        if public_read:
            kwargs["ACL"] = "public-read"

        try:
            return self._call(f"Put {key}", lambda: client.put_object(**kwargs))
        except SpacesAPIError as e:
            raise SpacesUploadError(f"Upload of {key} failed: {e}") from e

    def delete_object(self, key: str) -> Any:
        """Delete an object.

        Raises:
            SpacesDeleteError: If the delete fails
        """
        client = self._get_client()
        try:
            return self._call(
                f"Delete {key}",
                lambda: client.delete_object(Bucket=self.bucket, Key=key),
            )
        except SpacesAPIError as e:
            raise SpacesDeleteError(f"Delete of {key} failed: {e}") from e
