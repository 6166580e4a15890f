# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Body codecs: JSON, XML, url-encoded and multipart forms.

Encoders return bytes (plus the Content-Type for form encodings) and raise
SerializationError / BodyIOError. Decoders return plain Python values which
``assign`` copies into a caller supplied target.
"""

from __future__ import annotations

import dataclasses
import json
import secrets
import types
import typing
from collections.abc import Callable, Iterable, Mapping
from enum import Enum
from typing import Any
from urllib.parse import urlencode
from xml.etree import ElementTree as ET

import httpx

from .errors import BodyIOError, SerializationError

JSON_CONTENT_TYPE = "application/json"
XML_CONTENT_TYPE = "application/xml"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# dataclass field metadata keys
NAME_KEY = "name"
XML_ATTR_KEY = "xml_attr"

_CHUNK_SIZE = 64 * 1024
_SCALARS: dict[str, type] = {"int": int, "float": float, "str": str, "bool": bool}

Decoder = Callable[[bytes], Any]


def drain(source: Any) -> bytes:
    """Read a body source (bytes, str, binary file-like or iterable of chunks) fully into memory."""
    if source is None:
        return b""
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    if isinstance(source, str):
        return source.encode("utf-8")
    try:
        read = getattr(source, "read", None)
        if callable(read):
            buffer = bytearray()
            while True:
                chunk = read(_CHUNK_SIZE)
                if not chunk:
                    break
                buffer.extend(chunk.encode("utf-8") if isinstance(chunk, str) else chunk)
            return bytes(buffer)
        if isinstance(source, Iterable):
            return b"".join(chunk.encode("utf-8") if isinstance(chunk, str) else bytes(chunk) for chunk in source)
    except (OSError, TypeError, ValueError) as exc:
        raise BodyIOError(f"failed to read request body: {exc}") from exc
    raise BodyIOError(f"unsupported body source: {type(source).__name__}")


def _plain(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {_field_name(f): _plain(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_plain(v) for v in value]
    return value


def _field_name(field: dataclasses.Field) -> str:
    return field.metadata.get(NAME_KEY, field.name)


def encode_json(obj: Any) -> bytes:
    try:
        return json.dumps(_plain(obj), separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"json: {exc}") from exc
    except RecursionError as exc:
        raise SerializationError("json: circular reference detected") from exc


def decode_json(data: bytes) -> Any:
    return json.loads(data)


def _xml_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _xml_append(parent: ET.Element, tag: str, value: Any) -> None:
    if value is None:
        return
    if isinstance(value, (list, tuple, set, frozenset)):
        for item in value:
            _xml_append(parent, tag, item)
        return
    parent.append(_xml_element(tag, value))


def _xml_element(tag: str, value: Any) -> ET.Element:
    if isinstance(value, ET.Element):
        return value
    element = ET.Element(tag)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        for f in dataclasses.fields(value):
            item = getattr(value, f.name)
            if f.metadata.get(XML_ATTR_KEY):
                if item is not None:
                    element.set(_field_name(f), _xml_text(item))
            else:
                _xml_append(element, _field_name(f), item)
    elif isinstance(value, Mapping):
        for key, item in value.items():
            key = str(key)
            if key.startswith("@"):
                element.set(key[1:], _xml_text(item))
            elif key == "#text":
                element.text = _xml_text(item)
            else:
                _xml_append(element, key, item)
    else:
        element.text = _xml_text(value)
    return element


def _xml_root_name(obj: Any, root: str | None) -> str:
    if root:
        return root
    name = getattr(obj, "__xml_name__", None)
    if name:
        return str(name)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return type(obj).__name__.lower()
    if isinstance(obj, ET.Element):
        return obj.tag
    if isinstance(obj, Mapping) and len(obj) == 1:
        return str(next(iter(obj)))
    raise SerializationError(f"xml: cannot infer a root element name for {type(obj).__name__}")


def encode_xml(obj: Any, root: str | None = None) -> bytes:
    """Marshal ``obj`` into an indented XML document.

    Dataclass fields flagged with ``metadata={"xml_attr": True}`` become
    attributes; mapping keys prefixed with ``@`` likewise. Sequences repeat the
    element. A single-key mapping without ``root`` uses its key as the root.
    """
    tag = _xml_root_name(obj, root)
    if isinstance(obj, Mapping) and root is None and len(obj) == 1 and not hasattr(obj, "__xml_name__"):
        obj = next(iter(obj.values()))
    try:
        element = _xml_element(tag, obj)
        ET.indent(element, space="  ")
        return ET.tostring(element, encoding="unicode").encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"xml: {exc}") from exc


def _xml_value(element: ET.Element) -> Any:
    children = list(element)
    if not children and not element.attrib:
        return element.text or ""
    value: dict[str, Any] = dict(element.attrib)
    for child in children:
        item = _xml_value(child)
        if child.tag in value and child.tag not in element.attrib:
            existing = value[child.tag]
            if isinstance(existing, list):
                existing.append(item)
            else:
                value[child.tag] = [existing, item]
        else:
            value[child.tag] = item
    text = (element.text or "").strip()
    if text:
        value["#text"] = text
    return value


def decode_xml(data: bytes) -> Any:
    """Parse an XML document and return the root element's value (root name dropped)."""
    return _xml_value(ET.fromstring(data))


def encode_form_urlencoded(form: Mapping[str, Any]) -> tuple[bytes, str]:
    try:
        pairs = []
        for key, values in form.items():
            if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
                values = [values]
            pairs.extend((str(key), v if isinstance(v, bytes) else str(v)) for v in values)
        return urlencode(pairs).encode("ascii"), FORM_CONTENT_TYPE
    except (TypeError, ValueError, UnicodeError) as exc:
        raise BodyIOError(f"form: {exc}") from exc


def encode_multipart(form: Mapping[str, bytes | str]) -> tuple[bytes, str]:
    """Encode plain form fields (no filenames) as multipart/form-data."""
    if not form:
        boundary = secrets.token_hex(16)
        return f"--{boundary}--\r\n".encode("ascii"), f"multipart/form-data; boundary={boundary}"
    try:
        files = [(str(key), (None, value.encode("utf-8") if isinstance(value, str) else bytes(value))) for key, value in form.items()]
        request = httpx.Request("POST", "http://multipart.invalid/", files=files)
        return request.read(), request.headers["Content-Type"]
    except (TypeError, ValueError) as exc:
        raise BodyIOError(f"multipart: {exc}") from exc


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError):
        # unresolvable string annotations (e.g. classes local to a function)
        return {f.name: _SCALARS.get(f.type, Any) if isinstance(f.type, str) else f.type for f in dataclasses.fields(cls)}


def _coerce(value: Any, hint: Any) -> Any:
    if hint is Any or hint is None:
        return value
    origin = typing.get_origin(hint)
    args = typing.get_args(hint)
    if origin is typing.Union or origin is types.UnionType:
        if value is None:
            return None
        candidates = [arg for arg in args if arg is not type(None)]
        return _coerce(value, candidates[0]) if len(candidates) == 1 else value
    if origin in (list, tuple, set, frozenset):
        items = value if isinstance(value, list) else [value]
        if args and args[0] is not Ellipsis:
            items = [_coerce(item, args[0]) for item in items]
        return origin(items)
    if origin is not None:
        return value
    if hint is bool:
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return bool(value)
    if hint in (int, float, str):
        if isinstance(value, hint) and not (hint is int and isinstance(value, bool)):
            return value
        return hint(value)
    if isinstance(hint, type) and issubclass(hint, Enum):
        return hint(value)
    if dataclasses.is_dataclass(hint) and isinstance(value, Mapping):
        hints = _type_hints(hint)
        kwargs = {
            f.name: _coerce(value[_field_name(f)], hints.get(f.name, Any))
            for f in dataclasses.fields(hint)
            if f.init and _field_name(f) in value
        }
        return hint(**kwargs)
    return value


def assign(target: Any, value: Any) -> None:
    """Copy a decoded value into ``target``.

    dict targets are updated, list targets replaced in place, dataclass
    instances and plain objects get matching fields/attributes (with scalar
    coercion for annotated dataclass fields) and callables receive the value.
    """
    if isinstance(target, dict):
        if not isinstance(value, Mapping):
            raise TypeError(f"cannot assign {type(value).__name__} to dict")
        target.update(value)
        return
    if isinstance(target, list):
        target[:] = value if isinstance(value, list) else [value]
        return
    if dataclasses.is_dataclass(target) and not isinstance(target, type):
        if not isinstance(value, Mapping):
            raise TypeError(f"cannot assign {type(value).__name__} to {type(target).__name__}")
        hints = _type_hints(type(target))
        for f in dataclasses.fields(target):
            name = _field_name(f)
            if name in value:
                setattr(target, f.name, _coerce(value[name], hints.get(f.name, Any)))
        return
    if callable(target):
        target(value)
        return
    if not isinstance(value, Mapping):
        raise TypeError(f"cannot assign {type(value).__name__} to {type(target).__name__}")
    for key, item in value.items():
        if hasattr(target, key):
            setattr(target, key, item)


__all__ = [
    "Decoder",
    "FORM_CONTENT_TYPE",
    "JSON_CONTENT_TYPE",
    "XML_CONTENT_TYPE",
    "assign",
    "decode_json",
    "decode_xml",
    "drain",
    "encode_form_urlencoded",
    "encode_json",
    "encode_multipart",
    "encode_xml",
]
