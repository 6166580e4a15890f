# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import io
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import pytest

from requester import codecs
from requester.errors import BodyIOError, SerializationError


class Color(Enum):
    RED = "red"
    BLUE = "blue"


@dataclass
class Owner:
    login: str = ""
    admin: bool = False


@dataclass
class Project:
    id: int = 0
    stars: float = 0.0
    color: Optional[Color] = None
    owner: Optional[Owner] = None
    tags: list[str] = field(default_factory=list)
    full_name: str = field(default="", metadata={"name": "fullName"})


class Plain:
    def __init__(self):
        self.name = ""
        self.size = 0


def test_drain_accepts_common_sources():
    assert codecs.drain(b"abc") == b"abc"
    assert codecs.drain(bytearray(b"abc")) == b"abc"
    assert codecs.drain("héllo") == "héllo".encode()
    assert codecs.drain(io.BytesIO(b"x" * 70000)) == b"x" * 70000
    assert codecs.drain(io.StringIO("text")) == b"text"
    assert codecs.drain([b"a", "b", bytearray(b"c")]) == b"abc"
    assert codecs.drain(None) == b""


def test_drain_rejects_unreadable_sources():
    with pytest.raises(BodyIOError):
        codecs.drain(42)
    with pytest.raises(BodyIOError):
        codecs.drain([object()])


def test_encode_json_handles_dataclasses_and_enums():
    project = Project(id=1, color=Color.RED, owner=Owner("octo"), tags=["a"], full_name="octo/repo")
    assert codecs.encode_json(project) == (
        b'{"id":1,"stars":0.0,"color":"red","owner":{"login":"octo","admin":false},"tags":["a"],"fullName":"octo/repo"}'
    )


def test_encode_json_rejects_unserializable():
    with pytest.raises(SerializationError):
        codecs.encode_json({"when": object()})


def test_encode_xml_from_mapping():
    body = codecs.encode_xml({"repo": {"@id": 5, "name": "x", "tags": ["a", "b"], "private": True}})
    assert body.decode() == (
        '<repo id="5">\n  <name>x</name>\n  <tags>a</tags>\n  <tags>b</tags>\n  <private>true</private>\n</repo>'
    )


def test_encode_xml_dataclass_root_name_and_override():
    assert codecs.encode_xml(Owner("octo")).startswith(b"<owner>")
    assert codecs.encode_xml(Owner("octo"), root="user").startswith(b"<user>")


def test_encode_xml_requires_root_name():
    with pytest.raises(SerializationError):
        codecs.encode_xml({"a": 1, "b": 2})
    with pytest.raises(SerializationError):
        codecs.encode_xml([1, 2])


def test_decode_xml_returns_root_value():
    assert codecs.decode_xml(b"<message>hi</message>") == "hi"
    assert codecs.decode_xml(b'<r a="1">lead<b>2</b><b>3</b></r>') == {"a": "1", "b": ["2", "3"], "#text": "lead"}


def test_form_encoders():
    body, content_type = codecs.encode_form_urlencoded({"q": "a&b", "n": [1, 2]})
    assert body == b"q=a%26b&n=1&n=2"
    assert content_type == codecs.FORM_CONTENT_TYPE

    body, content_type = codecs.encode_multipart({})
    boundary = content_type.split("boundary=", 1)[1]
    assert body == f"--{boundary}--\r\n".encode()


def test_assign_coerces_into_dataclass():
    project = Project()
    codecs.assign(
        project,
        {
            "id": "12",
            "stars": "4.5",
            "color": "blue",
            "owner": {"login": "octo", "admin": "true"},
            "tags": "solo",
            "fullName": "octo/repo",
            "unknown": "ignored",
        },
    )
    assert project == Project(
        id=12,
        stars=4.5,
        color=Color.BLUE,
        owner=Owner("octo", True),
        tags=["solo"],
        full_name="octo/repo",
    )


def test_assign_into_plain_object_dict_and_list():
    plain = Plain()
    codecs.assign(plain, {"name": "n", "size": 3, "extra": 1})
    assert (plain.name, plain.size) == ("n", 3)
    assert not hasattr(plain, "extra")

    target = {"a": 1}
    codecs.assign(target, {"b": 2})
    assert target == {"a": 1, "b": 2}

    items = [9]
    codecs.assign(items, "x")
    assert items == ["x"]


def test_assign_type_mismatch():
    with pytest.raises(TypeError):
        codecs.assign({}, [1, 2])
    with pytest.raises(TypeError):
        codecs.assign(Project(), "text")


def test_encode_json_reports_circular_reference():
    data = {"name": "loop"}
    data["self"] = data
    with pytest.raises(SerializationError, match="circular reference"):
        codecs.encode_json(data)
