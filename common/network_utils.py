# common/network_utils.py
# -*- coding: utf-8 -*-
"""
HTTP helpers for fetching release listings and downloading archives.

Both calls always carry an explicit timeout; an expired timeout surfaces as
``DownloadTimeout`` rather than hanging the run.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import requests

from provisioning.errors import (
    CatalogUnavailable,
    DownloadFailure,
    DownloadTimeout,
)

module_logger = logging.getLogger(__name__)

USER_AGENT = "kraft-provisioner/1.0"


def fetch_text(url: str, timeout: float = 60.0) -> str:
    """
    Fetch a document and return its body as text.

    Args:
        url: The listing URL.
        timeout: Seconds to wait for the server.

    Returns:
        The decoded response body. No structure is assumed.

    Raises:
        DownloadTimeout: If the request times out.
        CatalogUnavailable: For connection failures and HTTP error statuses.
    """
    module_logger.debug(f"GET {url}")
    try:
        response = requests.get(
            url, timeout=timeout, headers={"User-Agent": USER_AGENT}
        )
        response.raise_for_status()
    except requests.exceptions.Timeout as timeout_err:
        raise DownloadTimeout(
            f"Timed out after {timeout}s fetching {url}: {timeout_err}"
        ) from timeout_err
    except requests.exceptions.RequestException as req_err:
        raise CatalogUnavailable(f"Could not fetch {url}: {req_err}") from req_err
    return response.text


def download_file(
    url: str,
    download_to_path: Union[str, Path],
    timeout: float = 60.0,
    logger: Optional[logging.Logger] = None,
) -> Path:
    """
    Download ``url`` to ``download_to_path`` in streamed chunks.

    Args:
        url: The archive URL.
        download_to_path: Destination file path; parent directories are created.
        timeout: Seconds to wait for each network read.
        logger: Optional logger instance.

    Returns:
        The path of the downloaded file.

    Raises:
        DownloadTimeout: If the server stops responding.
        DownloadFailure: For HTTP error statuses, connection and I/O errors.
    """
    logger_to_use = logger or module_logger
    download_path = Path(download_to_path)
    logger_to_use.info(f"Downloading {url}")

    try:
        download_path.parent.mkdir(parents=True, exist_ok=True)
        with requests.get(
            url,
            stream=True,
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
        ) as response:
            response.raise_for_status()
            with open(download_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=8192):
                    if chunk:
                        f.write(chunk)
    except requests.exceptions.Timeout as timeout_err:
        raise DownloadTimeout(
            f"Timed out after {timeout}s downloading {url}: {timeout_err}"
        ) from timeout_err
    except requests.exceptions.HTTPError as http_err:
        raise DownloadFailure(f"HTTP error downloading {url}: {http_err}") from http_err
    except requests.exceptions.RequestException as req_err:
        raise DownloadFailure(f"Could not download {url}: {req_err}") from req_err
    except OSError as io_err:
        raise DownloadFailure(
            f"File I/O error saving {url} to {download_path}: {io_err}"
        ) from io_err

    logger_to_use.info(f"Downloaded to {download_path}")
    return download_path
