"""
Unit tests for RequestDecoder
"""
import httpx
import pytest
from starlette.requests import Request

from app.common.errors import DecodeError
from app.common.request_decoder import RequestDecoder


def make_request(body: bytes, content_type: str = None) -> Request:
    headers = []
    if content_type is not None:
        headers.append((b"content-type", content_type.encode("latin-1")))

    async def receive():
        return {"type": "http.request", "body": body, "more_body": False}

    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/blogs",
        "headers": headers,
        "query_string": b"",
    }
    return Request(scope, receive)


def make_multipart_request(data: dict, files: dict = None) -> Request:
    """Let httpx encode the multipart body exactly as a client would"""
    files = files or {"image": ("empty.png", b"", "image/png")}
    built = httpx.Request("POST", "http://test/api/blogs", data=data, files=files)
    return make_request(built.read(), built.headers["content-type"])


@pytest.fixture
def decoder():
    return RequestDecoder(json_fields=("tags",), bool_fields=("visible", "featured"))


class TestJsonDecoding:

    @pytest.mark.asyncio
    async def test_decode_json_object(self, decoder):
        request = make_request(b'{"title": "A", "tags": ["x"], "visible": false}', "application/json")

        decoded = await decoder.decode(request)

        assert decoded.fields == {"title": "A", "tags": ["x"], "visible": False}
        assert decoded.attachment is None

    @pytest.mark.asyncio
    async def test_decode_json_with_charset(self, decoder):
        request = make_request(b'{"title": "A"}', "application/json; charset=utf-8")

        decoded = await decoder.decode(request)

        assert decoded.fields == {"title": "A"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [b"", b"{", b"not json"])
    async def test_decode_malformed_json(self, decoder, body):
        with pytest.raises(DecodeError):
            await decoder.decode(make_request(body, "application/json"))

    @pytest.mark.asyncio
    async def test_decode_json_array_is_rejected(self, decoder):
        with pytest.raises(DecodeError, match="JSON object"):
            await decoder.decode(make_request(b"[1, 2]", "application/json"))


class TestMultipartDecoding:

    @pytest.mark.asyncio
    async def test_decode_fields_and_attachment(self, decoder):
        request = make_multipart_request(
            data={"title": "A", "tags": '["robotics", "ai"]', "visible": "false", "featured": "TRUE"},
            files={"image": ("cover.jpg", b"\xff\xd8\xff\xe0data", "image/jpeg")},
        )

        decoded = await decoder.decode(request)

        assert decoded.fields == {
            "title": "A",
            "tags": ["robotics", "ai"],
            "visible": False,
            "featured": True,
        }
        assert decoded.attachment is not None
        assert decoded.attachment.content == b"\xff\xd8\xff\xe0data"
        assert decoded.attachment.mime_type == "image/jpeg"
        assert decoded.attachment.size_bytes == 8
        assert decoded.attachment.filename == "cover.jpg"

    @pytest.mark.asyncio
    async def test_decode_empty_file_is_not_an_attachment(self, decoder):
        request = make_multipart_request(data={"title": "A"})

        decoded = await decoder.decode(request)

        assert decoded.fields == {"title": "A"}
        assert decoded.attachment is None

    @pytest.mark.asyncio
    async def test_decode_empty_json_field(self, decoder):
        decoded = await decoder.decode(make_multipart_request(data={"tags": ""}))

        assert decoded.fields == {"tags": []}

    @pytest.mark.asyncio
    async def test_decode_malformed_json_field(self, decoder):
        with pytest.raises(DecodeError, match="tags"):
            await decoder.decode(make_multipart_request(data={"tags": "[robotics"}))

    @pytest.mark.asyncio
    async def test_decode_repeated_field(self, decoder):
        decoded = await decoder.decode(make_multipart_request(data={"category": ["News", "Events"]}))

        assert decoded.fields == {"category": ["News", "Events"]}


class TestUnsupportedEncodings:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content_type", [None, "text/plain", "application/x-www-form-urlencoded"])
    async def test_decode_rejects_other_content_types(self, decoder, content_type):
        with pytest.raises(DecodeError, match="Unsupported content type"):
            await decoder.decode(make_request(b"title=A", content_type))
