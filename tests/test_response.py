"""
Тесты сериализации ответов.
"""
from httpd.utils.http import MalformedRequest, MethodNotAllowed, VersionNotSupported
from httpd.utils.response import HttpResponse, serialize_error, serialize_response


class TestSerializeResponse:

    def test_empty_ok(self):
        assert serialize_response(HttpResponse(200)) == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 0\r\n"
            b"\r\n"
        )

    def test_body_and_length(self):
        data = serialize_response(HttpResponse(200, body=b"abc"))

        assert data.endswith(b"Content-Length: 3\r\n\r\nabc")

    def test_length_counts_bytes_not_characters(self):
        body = "привет".encode("utf-8")
        data = serialize_response(HttpResponse(200, body=body))

        assert f"Content-Length: {len(body)}\r\n".encode() in data
        assert data.endswith(body)

    def test_reason_from_table(self):
        assert serialize_response(HttpResponse(201)).startswith(b"HTTP/1.1 201 Created\r\n")
        assert serialize_response(HttpResponse(404)).startswith(b"HTTP/1.1 404 Not Found\r\n")

    def test_unknown_status_has_empty_reason(self):
        assert serialize_response(HttpResponse(418)).startswith(b"HTTP/1.1 418 \r\n")

    def test_explicit_reason_wins(self):
        response = HttpResponse(405, reason="Method Not Allowed")

        assert serialize_response(response).startswith(b"HTTP/1.1 405 Method Not Allowed\r\n")

    def test_headers_in_insertion_order(self):
        response = HttpResponse(200, body=b"x", headers={
            "Content-Encoding": "gzip",
            "X-First": "1",
        })
        head = serialize_response(response).split(b"\r\n\r\n")[0]

        assert head.split(b"\r\n")[1:] == [
            b"Content-Encoding: gzip",
            b"X-First: 1",
            b"Content-Type: text/plain",
            b"Content-Length: 1",
        ]

    def test_explicit_content_type_kept(self):
        response = HttpResponse(200, headers={"content-type": "application/octet-stream"})
        data = serialize_response(response)

        assert b"content-type: application/octet-stream\r\n" in data
        assert b"text/plain" not in data

    def test_explicit_content_length_kept(self):
        response = HttpResponse(200, body=b"abc", headers={"Content-Length": "3"})
        data = serialize_response(response)

        assert data.count(b"Content-Length") == 1

    def test_response_not_mutated(self):
        response = HttpResponse(200, body=b"abc")
        serialize_response(response)

        assert response.headers == {}

    def test_version_passed_through(self):
        assert serialize_response(HttpResponse(200), "HTTP/1.1").startswith(b"HTTP/1.1 ")


class TestSerializeError:

    def test_version_not_supported(self):
        assert serialize_error(VersionNotSupported()) == (
            b"HTTP/1.1 505 HTTP Version Not Supported\r\n\r\n"
        )

    def test_method_not_allowed(self):
        assert serialize_error(MethodNotAllowed("PATCH")) == (
            b"HTTP/1.1 405 Method Not Allowed\r\n\r\n"
        )

    def test_malformed(self):
        assert serialize_error(MalformedRequest()) == b"HTTP/1.1 400 Bad Request\r\n\r\n"
