# -*- coding: utf-8 -*-
from pathlib import Path

import pytest
import requests
from pytest_mock import MockerFixture

from common.network_utils import download_file, fetch_text
from provisioning.errors import CatalogUnavailable, DownloadFailure, DownloadTimeout


@pytest.fixture
def mock_get(mocker: MockerFixture):
    return mocker.patch("common.network_utils.requests.get")


def test_fetch_text_returns_body(mock_get):
    mock_get.return_value.text = "jdk-21.0.1"

    assert fetch_text("https://example.test/", timeout=3) == "jdk-21.0.1"
    assert mock_get.call_args.kwargs["timeout"] == 3


def test_fetch_text_timeout(mock_get):
    mock_get.side_effect = requests.exceptions.ReadTimeout("slow")

    with pytest.raises(DownloadTimeout):
        fetch_text("https://example.test/")


def test_fetch_text_http_error(mock_get):
    mock_get.return_value.raise_for_status.side_effect = requests.exceptions.HTTPError("503")

    with pytest.raises(CatalogUnavailable, match="503"):
        fetch_text("https://example.test/")


def _streaming_response(mocker: MockerFixture, chunks):
    response = mocker.MagicMock()
    response.__enter__.return_value = response
    response.iter_content.return_value = chunks
    return response


def test_download_file_streams_chunks(tmp_path: Path, mocker: MockerFixture, mock_get):
    mock_get.return_value = _streaming_response(mocker, [b"abc", b"", b"def"])

    path = download_file("https://example.test/a.tgz", tmp_path / "dl" / "a.tgz", timeout=9)

    assert path.read_bytes() == b"abcdef"
    assert mock_get.call_args.kwargs["stream"] is True
    assert mock_get.call_args.kwargs["timeout"] == 9


def test_download_file_not_found(tmp_path: Path, mocker: MockerFixture, mock_get):
    response = _streaming_response(mocker, [])
    response.raise_for_status.side_effect = requests.exceptions.HTTPError("404 Not Found")
    mock_get.return_value = response

    with pytest.raises(DownloadFailure, match="404"):
        download_file("https://example.test/missing.tgz", tmp_path / "missing.tgz")


def test_download_file_timeout_is_not_plain_failure(tmp_path: Path, mock_get):
    mock_get.side_effect = requests.exceptions.ConnectTimeout("no answer")

    with pytest.raises(DownloadTimeout):
        download_file("https://example.test/a.tgz", tmp_path / "a.tgz")


def test_download_file_connection_error(tmp_path: Path, mock_get):
    mock_get.side_effect = requests.exceptions.ConnectionError("refused")

    with pytest.raises(DownloadFailure, match="refused"):
        download_file("https://example.test/a.tgz", tmp_path / "a.tgz")
