"""
Request decoding for content resources

Normalizes JSON and multipart/form-data submissions into one payload shape
so the services never look at the request encoding.
"""
from fastapi import Request
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional
import json
import logging

from app.common.errors import DecodeError

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
MULTIPART_CONTENT_TYPE = "multipart/form-data"


@dataclass
class Attachment:
    """Binary part of a multipart submission"""
    content: bytes
    mime_type: str
    size_bytes: int
    filename: str


@dataclass
class DecodedRequest:
    fields: Dict[str, Any] = field(default_factory=dict)
    attachment: Optional[Attachment] = None


def _media_type(header: Optional[str]) -> str:
    """Strip parameters (charset, boundary) from a Content-Type header"""
    if not header:
        return ""
    return header.split(";", 1)[0].strip().lower()


class RequestDecoder:
    """
    Decode a request body into fields plus zero-or-one attachment.

    Args:
        json_fields: form fields whose string value is itself JSON (e.g. a tags array)
        bool_fields: form fields sent as "true"/"false" strings
    """

    def __init__(self, json_fields: Iterable[str] = (), bool_fields: Iterable[str] = ()):
        self.json_fields = set(json_fields)
        self.bool_fields = set(bool_fields)

    async def decode(self, request: Request) -> DecodedRequest:
        media_type = _media_type(request.headers.get("content-type"))

        if media_type == MULTIPART_CONTENT_TYPE:
            return await self._decode_multipart(request)
        if media_type == JSON_CONTENT_TYPE or media_type.endswith("+json"):
            return await self._decode_json(request)

        raise DecodeError(
            f"Unsupported content type: {media_type or 'missing'}. "
            f"Use {JSON_CONTENT_TYPE} or {MULTIPART_CONTENT_TYPE}"
        )

    async def _decode_json(self, request: Request) -> DecodedRequest:
        try:
            body = await request.json()
        except ValueError:
            raise DecodeError("Request body must be valid JSON")

        if not isinstance(body, dict):
            raise DecodeError("Request body must be a JSON object")

        return DecodedRequest(fields=body)

    async def _decode_multipart(self, request: Request) -> DecodedRequest:
        try:
            form = await request.form()
        except (MultiPartException, StarletteHTTPException, ValueError) as e:
            detail = getattr(e, "detail", None) or getattr(e, "message", None) or str(e)
            raise DecodeError(f"Malformed multipart body: {detail}")

        try:
            return await self._collect(form)
        finally:
            await form.close()

    async def _collect(self, form) -> DecodedRequest:
        decoded = DecodedRequest()

        for name, value in form.multi_items():
            if isinstance(value, UploadFile):
                content = await value.read()
                if not content:
                    continue
                if decoded.attachment is not None:
                    logger.warning(f"Ignoring extra file part '{name}' ({value.filename})")
                    continue
                decoded.attachment = Attachment(
                    content=content,
                    mime_type=value.content_type or "application/octet-stream",
                    size_bytes=len(content),
                    filename=value.filename or name,
                )
                continue

            decoded_value = self._decode_form_value(name, value)
            if name in decoded.fields:
                existing = decoded.fields[name]
                if not isinstance(existing, list):
                    existing = [existing]
                existing.append(decoded_value)
                decoded.fields[name] = existing
            else:
                decoded.fields[name] = decoded_value

        return decoded

    def _decode_form_value(self, name: str, value: str) -> Any:
        if name in self.json_fields:
            if not value.strip():
                return []
            try:
                return json.loads(value)
            except ValueError:
                raise DecodeError(f"Field '{name}' must be a JSON-encoded value")
        if name in self.bool_fields:
            return value.strip().lower() == "true"
        return value
