"""Helpers for reading entity schema documents.

Schema documents are JSON and may live on disk or behind an HTTP
endpoint (for example a build server exporting its entity definitions).
"""

import json
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import requests

from .logging_config import get_logger

logger = get_logger(__name__)


class JSONLoaderError(Exception):
    """Raised when a schema document cannot be fetched or decoded."""

    pass


def load_json_from_file(file_path: str | Path) -> tuple[str, Any]:
    """Read and decode a schema document from disk.

    Returns:
        Tuple of (source description, decoded document).

    Raises:
        FileNotFoundError: If the file doesn't exist.
        JSONLoaderError: If the file cannot be read or decoded.
    """
    file_path = Path(file_path)
    logger.debug(f"Reading schema document: {file_path}")

    if not file_path.is_file():
        logger.error(f"Schema file not found: {file_path}")
        raise FileNotFoundError(f"Schema file not found: {file_path}")

    try:
        with file_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Malformed JSON in {file_path}: {e}")
        raise JSONLoaderError(f"Malformed JSON in {file_path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Cannot read {file_path}: {e}")
        raise JSONLoaderError(f"Cannot read {file_path}: {e}") from e

    logger.info(f"Loaded schema document from {file_path}")
    return f"file {file_path}", data


def load_json_from_url(url: str, timeout: int = 30) -> tuple[str, Any]:
    """Fetch and decode a schema document over HTTP(S).

    Raises:
        JSONLoaderError: On a bad URL, a failed request or a non-JSON body.
    """
    logger.debug(f"Fetching schema document: {url}")

    parsed_url = urlparse(url)
    if parsed_url.scheme not in ("http", "https") or not parsed_url.netloc:
        logger.error(f"Invalid schema URL: {url}")
        raise JSONLoaderError(f"Invalid URL: {url}")

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except requests.exceptions.Timeout as e:
        logger.error(f"Timed out fetching {url}")
        raise JSONLoaderError(f"Request timeout for URL: {url}") from e
    except requests.exceptions.HTTPError as e:
        logger.error(f"HTTP error {e.response.status_code} for {url}")
        raise JSONLoaderError(
            f"HTTP error {e.response.status_code} for URL: {url}"
        ) from e
    except requests.exceptions.RequestException as e:
        logger.error(f"Request to {url} failed: {e}")
        raise JSONLoaderError(f"Request error for URL {url}: {e}") from e
    except ValueError as e:
        # requests raises a ValueError subclass for undecodable bodies
        logger.error(f"Response from {url} is not JSON: {e}")
        raise JSONLoaderError(f"Invalid JSON response from URL {url}: {e}") from e

    logger.info(f"Loaded schema document from {url}")
    return f"url {url}", data


def load_json(
    file_path: str | Path | None = None,
    url: str | None = None,
    timeout: int = 30,
) -> tuple[str, Any]:
    """Load a schema document from exactly one of a file or a URL.

    Raises:
        JSONLoaderError: If neither or both sources are given, or loading fails.
        FileNotFoundError: If the file doesn't exist.
    """
    if not file_path and not url:
        raise JSONLoaderError("Either file_path or url must be provided")

    if file_path and url:
        raise JSONLoaderError("Cannot specify both file_path and url")

    if file_path:
        return load_json_from_file(file_path)
    return load_json_from_url(url, timeout)
