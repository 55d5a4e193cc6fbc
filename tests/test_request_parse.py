from __future__ import annotations

import logging

import pytest

from rawhttp import DiagnosticKind, Method, Request, RequestParseError, parse_request


def _pairs(items) -> list[tuple[str, str]]:
    return [(item.name, item.value) for item in items]


def test_parse_simple_get() -> None:
    request = Request.parse("GET / HTTP/1.1\r\nHost: localhost\r\n\r\n")

    assert request.initialized is True
    assert request.method is Method.GET
    assert request.path == "/"
    assert request.full_path == "/"
    assert request.version == "HTTP/1.1"
    assert _pairs(request.headers) == [("Host", "localhost")]
    assert request.query == ()
    assert request.body == ""


def test_parse_query_parameters_in_order() -> None:
    request = Request.parse("GET /?name=value&test=test2 HTTP/1.1\r\nHost: localhost\r\n\r\n")

    assert request.path == "/"
    assert request.full_path == "/?name=value&test=test2"
    assert _pairs(request.query) == [("name", "value"), ("test", "test2")]
    assert _pairs(request.headers) == [("Host", "localhost")]
    assert request.body == ""


def test_parse_post_with_query_and_body() -> None:
    request = Request.parse(
        "POST /?name=value HTTP/1.1\r\nHost: localhost\r\nContent-Type: plain\r\n\r\nbody"
    )

    assert request.method is Method.POST
    assert request.path == "/"
    assert _pairs(request.headers) == [("Host", "localhost"), ("Content-Type", "plain")]
    assert _pairs(request.query) == [("name", "value")]
    assert request.body == "body"


def test_parse_accepts_lf_line_endings_and_keeps_version() -> None:
    request = Request.parse("PUT /upload HTTP/1.0\nContent-Length: 5\n\nab\ncd")

    assert request.method is Method.PUT
    assert request.version == "HTTP/1.0"
    assert request.content_length() == "5"
    assert request.body == "ab\r\ncd"


@pytest.mark.parametrize("separator", ["\x0b", "\x0c", "\x1c", "\x85", "\u2028", "\u2029", "\r"])
def test_only_line_feeds_end_lines(separator: str) -> None:
    request = Request.parse(
        f"POST / HTTP/1.1\r\nX-Note: a{separator}b\r\n\r\npage1{separator}page2"
    )

    assert request.find_header("x-note").value == f"a{separator}b"
    assert request.body == f"page1{separator}page2"


def test_trailing_newline_does_not_add_a_body_line() -> None:
    request = Request.parse("POST / HTTP/1.1\r\n\r\nbody\r\n")

    assert request.body == "body"


def test_body_lines_are_kept_verbatim() -> None:
    request = Request.parse("POST / HTTP/1.1\r\nHost: a\r\n\r\nkey: value\r\n\r\nlast")

    assert _pairs(request.headers) == [("Host", "a")]
    assert request.body == "key: value\r\n\r\nlast"


def test_post_without_blank_line_has_no_body() -> None:
    request = Request.parse("POST /submit HTTP/1.1\r\nHost: a\r\npayload")

    assert request.body == ""
    assert _pairs(request.headers) == [("Host", "a")]


def test_blank_line_does_not_open_body_for_get() -> None:
    request = Request.parse("GET / HTTP/1.1\r\n\r\nAccept: */*\r\nignored")

    assert request.body == ""
    assert _pairs(request.headers) == [("Accept", "*/*")]


def test_duplicate_headers_keep_first_occurrence() -> None:
    request = Request.parse("GET / HTTP/1.1\r\nHost: first\r\nHOST: second\r\nX-Id: 1\r\n\r\n")

    assert _pairs(request.headers) == [("Host", "first"), ("X-Id", "1")]


def test_repeated_query_name_updates_earlier_value() -> None:
    request = Request.parse("GET /search?q=a&page=1&q=b HTTP/1.1\r\n\r\n")

    assert _pairs(request.query) == [("q", "b"), ("page", "1")]


def test_query_names_are_case_sensitive() -> None:
    request = Request.parse("GET /?name=lower&Name=upper HTTP/1.1\r\n\r\n")

    assert _pairs(request.query) == [("name", "lower"), ("Name", "upper")]


def test_malformed_query_pairs_are_skipped() -> None:
    result = parse_request("GET /items?a=1&flag&b=2=3&c= HTTP/1.1\r\n\r\n")

    assert _pairs(result.request.query) == [("a", "1"), ("c", "")]
    assert [d.text for d in result.of_kind(DiagnosticKind.MALFORMED_QUERY_PAIR)] == ["flag", "b=2=3"]
    assert result.ok is False


def test_target_with_two_question_marks_keeps_path_only() -> None:
    request = Request.parse("GET /a?b=1?c=2 HTTP/1.1\r\n\r\n")

    assert request.path == "/a"
    assert request.full_path == "/a?b=1?c=2"
    assert request.query == ()


def test_malformed_request_line_keeps_defaults_and_continues() -> None:
    result = parse_request("GET /only-two-tokens\r\nHost: localhost\r\n\r\n")
    request = result.request

    assert [d.kind for d in result.diagnostics] == [DiagnosticKind.MALFORMED_REQUEST_LINE]
    assert request.initialized is True
    assert request.method is Method.GET
    assert request.path == ""
    assert request.full_path == ""
    assert _pairs(request.headers) == [("Host", "localhost")]


def test_unknown_method_leaves_request_line_unapplied() -> None:
    result = parse_request("BREW /pot?sugar=1 HTTP/1.1\r\nAccept: coffee\r\n\r\n")
    request = result.request

    assert result.diagnostics[0].kind is DiagnosticKind.MALFORMED_REQUEST_LINE
    assert "BREW" in result.diagnostics[0].message
    assert request.method is Method.GET
    assert request.path == ""
    assert request.query == ()
    assert request.version == "HTTP/1.1"
    assert _pairs(request.headers) == [("Accept", "coffee")]


def test_empty_input_yields_defaults_and_one_diagnostic() -> None:
    result = parse_request("")

    assert len(result.diagnostics) == 1
    assert result.diagnostics[0].kind is DiagnosticKind.MALFORMED_REQUEST_LINE
    assert result.request.initialized is True
    assert result.request.path == ""
    assert result.request.headers == ()


def test_malformed_header_line_is_reported_and_skipped() -> None:
    result = parse_request("GET / HTTP/1.1\r\nX-Test: a: b\r\nno separator here\r\nHost: h\r\n\r\n")

    assert _pairs(result.request.headers) == [("Host", "h")]
    assert len(result.diagnostics) == 1
    diagnostic = result.diagnostics[0]
    assert diagnostic.kind is DiagnosticKind.MALFORMED_HEADER_LINE
    assert diagnostic.line == 1
    assert diagnostic.text == "X-Test: a: b"


def test_malformed_lines_are_logged_as_errors(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.ERROR, logger="rawhttp.request"):
        Request.parse("GET / HTTP/1.1 extra\r\n\r\n")

    assert "Invalid request line: `GET / HTTP/1.1 extra`" in caplog.text


def test_strict_parse_raises_with_best_effort_request() -> None:
    with pytest.raises(RequestParseError) as exc:
        parse_request("GET /?broken HTTP/1.1\r\nHost: h\r\n\r\n", strict=True)

    assert [d.kind for d in exc.value.diagnostics] == [DiagnosticKind.MALFORMED_QUERY_PAIR]
    assert exc.value.request.find_header("host").value == "h"


def test_strict_parse_accepts_clean_input() -> None:
    result = parse_request("DELETE /items/7 HTTP/1.1\r\nHost: h\r\n\r\n", strict=True)

    assert result.ok is True
    assert result.request.method is Method.DELETE


def test_parse_from_str_merges_into_existing_request() -> None:
    request = Request()
    request.add_header("Host", "preset")

    diagnostics = request.parse_from_str("GET /x HTTP/1.1\r\nhost: parsed\r\nAccept: */*\r\n\r\n")

    assert diagnostics == []
    assert _pairs(request.headers) == [("Host", "preset"), ("Accept", "*/*")]
    assert request.path == "/x"


def test_full_path_is_a_parse_time_snapshot() -> None:
    request = Request.parse("GET /old?x=1 HTTP/1.1\r\n\r\n")

    request.set_path("/new")
    request.add_query("y", "2")

    assert request.full_path == "/old?x=1"
    assert request.build().startswith("GET /new?x=1&y=2 HTTP/1.1\r\n")


@pytest.mark.parametrize(
    "raw",
    [
        "GET / HTTP/1.1\r\nHost: localhost\r\n\r\n",
        "POST /?name=value HTTP/1.1\r\nHost: localhost\r\nContent-Type: plain\r\n\r\nbody",
        "PATCH /users/1?fields=name&v=2 HTTP/1.1\r\nAuthorization: Bearer t\r\n\r\n",
    ],
)
def test_parse_of_build_reproduces_fields(raw: str) -> None:
    original = Request.parse(raw)
    reparsed = Request.parse(original.build())

    assert reparsed.method is original.method
    assert reparsed.path == original.path
    assert _pairs(reparsed.headers) == _pairs(original.headers)
    assert _pairs(reparsed.query) == _pairs(original.query)
    assert reparsed.body == original.body
