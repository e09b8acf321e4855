"""API client for the Storyblok management API."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any

import httpx

from .config import Config
from .exceptions import (
    StoryblokAPIError,
    StoryblokAuthenticationError,
    StoryblokConfigError,
    StoryblokInvalidResponseError,
    StoryblokNetworkError,
    StoryblokNotFoundError,
    StoryblokPermissionError,
    StoryblokRateLimitError,
    StoryblokUploadError,
)


class StoryblokClient:
    """Client for the subset of the management API used by asset sync."""

    def __init__(self, config: Config):
        """Initialize the Storyblok client.

        Args:
            config: Validated configuration (token, space id, timeouts, retries)

        Raises:
            StoryblokConfigError: If the token or space id is missing
        """
        if not config.management_token:
            raise StoryblokConfigError(
                "Management token not configured. "
                "Please set STORYBLOK_MANAGEMENT_TOKEN environment variable."
            )
        if not config.space_id:
            raise StoryblokConfigError(
                "Space ID not configured. "
                "Please set STORYBLOK_SPACE_ID environment variable."
            )

        self.config = config
        self.api_url = config.api_url.rstrip("/")
        self.space_id = config.space_id
        self.max_retries = config.max_retries
        self.retry_delay = config.retry_delay
        self.timeout = config.timeout

        self._client: httpx.Client | None = None

    def __enter__(self) -> StoryblokClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _get_client(self) -> httpx.Client:
        """Get or create the httpx client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                headers={"Authorization": str(self.config.management_token)},
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
            )
        return self._client

    def close(self) -> None:
        """Close the client and release connections."""
        if self._client is not None and not self._client.is_closed:
            self._client.close()
            self._client = None

    def _calculate_retry_delay(self, attempt: int) -> float:
        """Calculate delay before next retry using exponential backoff.

        Args:
            attempt: Current attempt number (0-based)

        Returns:
            Delay in seconds
        """
        import random

        base_delay = self.retry_delay * (2**attempt)
        # +/- 25% jitter
        jitter = base_delay * 0.25 * (2 * random.random() - 1)
        return base_delay + jitter

    def _handle_http_error(
        self, e: httpx.HTTPStatusError, attempt: int
    ) -> tuple[Exception, bool]:
        """Translate an HTTP error and decide whether to retry.

        Args:
            e: The HTTP error exception
            attempt: Current attempt number

        Returns:
            Tuple of (exception to raise, should_retry)
        """
        status_code = e.response.status_code

        if status_code == 401:
            raise StoryblokAuthenticationError(
                "Invalid management token or unauthorized access"
            ) from e
        elif status_code == 403:
            raise StoryblokPermissionError(
                "Access forbidden - check the token's space permissions"
            ) from e
        elif status_code == 404:
            raise StoryblokNotFoundError("Resource not found") from e
        elif status_code == 429:
            error = StoryblokRateLimitError(
                "Rate limit exceeded - please try again later"
            )
            return (error, attempt < self.max_retries)
        else:
            error_msg = f"API request failed with status {status_code}"

            try:
                if e.response.content:
                    error_data = e.response.json()
                    if isinstance(error_data, dict):
                        msg = (
                            error_data.get("error")
                            or error_data.get("message")
                            or error_data.get("detail")
                        )
                        if msg:
                            error_msg = f"{error_msg}: {msg}"
                    elif isinstance(error_data, list) and error_data:
                        error_msg = f"{error_msg}: {error_data[0]}"
            except ValueError:
                pass

            error = StoryblokAPIError(error_msg)
            should_retry = 500 <= status_code < 600 and attempt < self.max_retries
            return (error, should_retry)

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        """Make an API request with retry logic.

        Args:
            method: HTTP method
            endpoint: API endpoint path, relative to the API URL
            **kwargs: Additional arguments passed to httpx

        Returns:
            Response JSON data ({} for an empty body)

        Raises:
            StoryblokAPIError: If the request fails after all retries
        """
        url = f"{self.api_url}/{endpoint.lstrip('/')}"
        client = self._get_client()

        attempt = 0
        while True:
            try:
                response = client.request(method, url, **kwargs)
                response.raise_for_status()

                content_type = response.headers.get("Content-Type", "")
                if response.content and "application/json" not in content_type:
                    raise StoryblokInvalidResponseError(
                        f"Unexpected response type: {content_type}"
                    )

                if response.content:
                    try:
                        return response.json()
                    except ValueError as e:
                        raise StoryblokInvalidResponseError(
                            "Invalid JSON response from server"
                        ) from e
                return {}

            except httpx.HTTPStatusError as e:
                error, should_retry = self._handle_http_error(e, attempt)

                if should_retry:
                    if isinstance(error, StoryblokRateLimitError):
                        retry_after = e.response.headers.get("Retry-After")
                        if retry_after and retry_after.isdigit():
                            delay = float(retry_after)
                        else:
                            delay = self._calculate_retry_delay(attempt)
                    else:
                        delay = self._calculate_retry_delay(attempt)
                    time.sleep(delay)
                    attempt += 1
                    continue
                raise error from e
            except StoryblokAPIError:
                raise
            except httpx.RequestError as e:
                error = StoryblokNetworkError(f"Network error: {e}")
                if attempt < self.max_retries:
                    time.sleep(self._calculate_retry_delay(attempt))
                    attempt += 1
                    continue
                raise error from e

    # =========================
    # Space
    # =========================

    def get_space(self) -> dict[str, Any]:
        """Get the configured space.

        Returns:
            Space data (``id``, ``name``, ...)

        Raises:
            StoryblokAPIError: If the request fails
        """
        response: dict[str, Any] = self._request("GET", f"/spaces/{self.space_id}")
        space = response.get("space")
        if not isinstance(space, dict):
            raise StoryblokInvalidResponseError(f"Invalid space response: {response}")
        return space

    # =========================
    # Assets
    # =========================

    def get_assets(self, page: int = 1, per_page: int = 100) -> list[dict[str, Any]]:
        """Get one page of assets in the space.

        Args:
            page: Page number (1-based)
            per_page: Number of assets per page

        Returns:
            List of raw asset dictionaries

        Raises:
            StoryblokAPIError: If the request fails
        """
        response: dict[str, Any] = self._request(
            "GET",
            f"/spaces/{self.space_id}/assets",
            params={"page": page, "per_page": per_page},
        )
        assets = response.get("assets", [])
        if not isinstance(assets, list):
            raise StoryblokInvalidResponseError(f"Invalid assets response: {response}")
        return assets

    def sign_asset_upload(
        self, filename: str, asset_folder_id: int | None = None
    ) -> dict[str, Any]:
        """Request signed upload credentials for a new asset.

        Args:
            filename: Target file name
            asset_folder_id: Optional destination asset folder

        Returns:
            Signed response with ``post_url``, ``fields`` and ``id`` keys

        Raises:
            StoryblokAPIError: If the request fails
        """
        payload: dict[str, Any] = {"filename": filename, "validate_upload": 1}
        if asset_folder_id:
            payload["asset_folder_id"] = asset_folder_id

        result: dict[str, Any] = self._request(
            "POST", f"/spaces/{self.space_id}/assets/", json=payload
        )
        return result

    def upload_to_blob_store(
        self,
        post_url: str,
        fields: dict[str, Any],
        file_path: Path,
        mime_type: str = "application/octet-stream",
    ) -> None:
        """Submit a file to the blob store using signed form fields.

        The ticket's fields are sent verbatim, followed by the file contents
        under the ``file`` field. The blob store answers 204 on success.

        Args:
            post_url: Signed upload URL from :meth:`sign_asset_upload`
            fields: Form fields from the signed response
            file_path: Local file to send
            mime_type: Content type of the file part

        Raises:
            StoryblokUploadError: If the transfer is rejected or fails
            OSError: If the file cannot be read
        """
        content = file_path.read_bytes()
        form = {key: str(value) for key, value in fields.items()}

        # Use httpx directly: the blob store must not see the API token
        try:
            response = httpx.post(
                post_url,
                data=form,
                files={"file": (file_path.name, content, mime_type)},
                timeout=self.config.upload_timeout,
            )
        except httpx.RequestError as e:
            raise StoryblokUploadError(f"Network error during upload: {e}") from e

        if response.status_code != 204:
            raise StoryblokUploadError(
                f"Blob store upload failed with status {response.status_code}: "
                f"{response.text[:200]}"
            )

    def finish_asset_upload(self, asset_id: int | str) -> dict[str, Any]:
        """Confirm a completed upload and get the final asset record.

        Args:
            asset_id: Provisional asset ID from the signed response

        Returns:
            Asset data including the CDN ``filename``

        Raises:
            StoryblokAPIError: If the request fails
        """
        result: dict[str, Any] = self._request(
            "GET", f"/spaces/{self.space_id}/assets/{asset_id}/finish_upload"
        )
        return result
