from unittest.mock import MagicMock, patch

import pytest
import requests

from config import Settings
from dblp_client import DblpIndex, TransportError

SETTINGS = Settings(
    base_url="https://dblp.example.org",
    search_url="https://search.example.org/search",
    timeout_seconds=5.0,
    user_agent="dblpbib-tests",
)


def _mock_resp(text: str = "", status_code: int = 200) -> MagicMock:
    """Return a mock requests.Response with the given body and status."""
    mock = MagicMock()
    mock.text = text
    mock.status_code = status_code
    if status_code >= 400:
        mock.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    return mock


def test_record_builds_bibtex_url_and_returns_text() -> None:
    index = DblpIndex(SETTINGS)

    with patch("dblp_client.requests.get", return_value=_mock_resp("<pre>x</pre>")) as mock_get:
        body = index.record("conf/icfp/Leroy00")

    assert body == "<pre>x</pre>"
    args, kwargs = mock_get.call_args
    assert args[0] == "https://dblp.example.org/rec/bibtex/conf/icfp/Leroy00"
    assert kwargs["timeout"] == 5.0
    assert kwargs["headers"] == {"User-Agent": "dblpbib-tests"}


def test_search_authors_passes_name_as_query_param() -> None:
    index = DblpIndex(SETTINGS)

    with patch("dblp_client.requests.get", return_value=_mock_resp("<authors/>")) as mock_get:
        index.search_authors("Xavier Leroy")

    args, kwargs = mock_get.call_args
    assert args[0] == "https://dblp.example.org/search/author"
    assert kwargs["params"] == {"xauthor": "Xavier Leroy"}


def test_author_endpoints_keep_handle_path() -> None:
    index = DblpIndex(SETTINGS)

    with patch("dblp_client.requests.get", return_value=_mock_resp("")) as mock_get:
        index.author_keys("l/Leroy:Xavier")
        index.author_by_year("l/Leroy:Xavier")

    urls = [call.args[0] for call in mock_get.call_args_list]
    assert urls == [
        "https://dblp.example.org/rec/pers/l/Leroy:Xavier/xk",
        "https://dblp.example.org/pers/tb/l/Leroy:Xavier",
    ]


def test_conference_lowercases_name() -> None:
    index = DblpIndex(SETTINGS)

    with patch("dblp_client.requests.get", return_value=_mock_resp("")) as mock_get:
        index.conference("ICFP")

    assert mock_get.call_args.args[0] == "https://dblp.example.org/db/conf/icfp/"


def test_page_resolves_relative_links_against_base() -> None:
    index = DblpIndex(SETTINGS)

    with patch("dblp_client.requests.get", return_value=_mock_resp("")) as mock_get:
        index.page("db/conf/icfp/icfp2010.html")
        index.page("https://mirror.example.org/db/conf/icfp/icfp2009.html")

    urls = [call.args[0] for call in mock_get.call_args_list]
    assert urls == [
        "https://dblp.example.org/db/conf/icfp/icfp2010.html",
        "https://mirror.example.org/db/conf/icfp/icfp2009.html",
    ]


def test_search_keyword_uses_search_url() -> None:
    index = DblpIndex(SETTINGS)

    with patch("dblp_client.requests.get", return_value=_mock_resp("")) as mock_get:
        index.search_keyword("compcert")

    args, kwargs = mock_get.call_args
    assert args[0] == "https://search.example.org/search"
    assert kwargs["params"] == {"query": "compcert"}


def test_not_found_returns_none() -> None:
    index = DblpIndex(SETTINGS)

    with patch("dblp_client.requests.get", return_value=_mock_resp("gone", status_code=404)):
        assert index.record("conf/none/X") is None


def test_http_error_raises_transport_error() -> None:
    index = DblpIndex(SETTINGS)

    with patch("dblp_client.requests.get", return_value=_mock_resp("oops", status_code=500)):
        with pytest.raises(TransportError):
            index.record("conf/icfp/Leroy00")


def test_network_error_raises_transport_error() -> None:
    index = DblpIndex(SETTINGS)

    with patch("dblp_client.requests.get", side_effect=requests.ConnectionError("refused")):
        with pytest.raises(TransportError, match="refused"):
            index.conference("icfp")
