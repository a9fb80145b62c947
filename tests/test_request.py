from __future__ import annotations

import pytest

from staticserver.http import BadRequestError, Method, head_end, parse_request


def test_parse_simple_get():
    request = parse_request(b"GET /index.html HTTP/1.1\r\nHost: localhost\r\n\r\n")

    assert request.method is Method.GET
    assert request.raw_path == "/index.html"
    assert request.version == "HTTP/1.1"
    assert request.header("host") == "localhost"
    assert not request.query_ignored


def test_bare_line_feeds_are_accepted():
    request = parse_request(b"GET / HTTP/1.0\n\n")

    assert request.raw_path == "/"
    assert request.version == "HTTP/1.0"


def test_request_line_without_headers_or_blank_line():
    assert parse_request(b"GET /a HTTP/1.1").raw_path == "/a"


def test_query_is_recognised_and_dropped():
    request = parse_request(b"GET /search?q=1&x=../etc HTTP/1.1\r\n\r\n")

    assert request.raw_path == "/search"
    assert request.query_ignored


def test_fragment_is_dropped():
    assert parse_request(b"GET /page#top HTTP/1.1\r\n\r\n").raw_path == "/page"


def test_other_methods_are_parsed_but_flagged():
    request = parse_request(b"POST /upload HTTP/1.1\r\n\r\n")

    assert request.method is Method.OTHER
    assert request.raw_method == "POST"


def test_lowercase_get_is_not_get():
    assert parse_request(b"get / HTTP/1.1\r\n\r\n").method is Method.OTHER


def test_body_after_head_is_ignored():
    request = parse_request(b"GET / HTTP/1.1\r\nHost: x\r\n\r\n\xff\xfe garbage")

    assert request.raw_path == "/"


@pytest.mark.parametrize(
    "raw",
    [
        b"",
        b"\r\n\r\n",
        b"GET\r\n\r\n",
        b"GET /\r\n\r\n",
        b"GET / HTTP/1.1 extra\r\n\r\n",
        b"GET / FTP/1.0\r\n\r\n",
        b"GET index.html HTTP/1.1\r\n\r\n",
        b"GET /\xff\xfe HTTP/1.1\r\n\r\n",
    ],
)
def test_malformed_requests(raw):
    with pytest.raises(BadRequestError):
        parse_request(raw)


def test_oversized_head_is_rejected():
    raw = b"GET /" + b"a" * 9000 + b" HTTP/1.1\r\n\r\n"

    with pytest.raises(BadRequestError):
        parse_request(raw, max_bytes=8192)


def test_oversized_head_without_terminator_is_rejected():
    with pytest.raises(BadRequestError):
        parse_request(b"GET /" + b"a" * 100, max_bytes=64)


def test_head_end_finds_earliest_terminator():
    assert head_end(b"GET / HTTP/1.0\n\nrest\r\n\r\n") == len(b"GET / HTTP/1.0\n\n")
    assert head_end(b"GET / HTTP/1.1\r\n") == -1


def test_header_lines_without_colon_are_skipped():
    request = parse_request(b"GET / HTTP/1.1\r\nnot a header\r\nHost: example.org\r\n\r\n")

    assert request.raw_path == "/"
    assert request.headers == (("Host", "example.org"),)
