"""Download of Notion-hosted images and files.

Notion serves uploaded files through short-lived signed URLs, so assets are
downloaded in the same run that discovered them.
"""

import logging

import requests

from .errors import AssetDownloadError

logger = logging.getLogger(__name__)


class AssetFetcher:
    """GETs a URL and returns its bytes.

    Example:
        >>> data = AssetFetcher().download("https://prod-files-secure.s3...")
    """

    def __init__(self, session: requests.Session = None, timeout: int = 30):
        self._session = session or requests.Session()
        self._timeout = timeout

    def download(self, url: str) -> bytes:
        """Download an asset.

        Args:
            url: Asset URL

        Returns:
            bytes: Response body

        Raises:
            AssetDownloadError: If the request fails or returns an error status
        """
        try:
            response = self._session.get(url, timeout=self._timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise AssetDownloadError(url, str(e)) from e

        logger.debug(f"Downloaded {len(response.content)} bytes from {url.split('?')[0]}")
        return response.content
