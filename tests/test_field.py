import asyncio
import http

import pytest

from echoscgi import field
from echoscgi.error import ResponseError


def test_parse_query_keeps_order_and_blanks():
    assert field.parse_query("a=1&b=&a=2&c") == {"a": ["1", "2"], "b": [""], "c": [""]}


def test_parse_query_empty():
    assert field.parse_query("") == {}
    assert field.parse_query(None) == {}


def test_parse_query_decodes():
    assert field.parse_query("q=caf%C3%A9+au+lait") == {"q": ["café au lait"]}


def test_content_length():
    assert field.content_length("15") == 15
    assert field.content_length("") == 0
    assert field.content_length(None) == 0


@pytest.mark.parametrize("value,status", [("abc", 400), ("-1", 400)])
def test_content_length_invalid(value, status):
    with pytest.raises(ResponseError) as info:
        field.content_length(value)
    assert info.value.status == status


def test_content_length_over_limit(monkeypatch):
    monkeypatch.setattr(field, "MAX_CONTENT_LENGTH", 10)
    with pytest.raises(ResponseError) as info:
        field.content_length("11")
    assert info.value.status == 413
    assert info.value.reason == http.HTTPStatus(413).phrase


def test_read_body_exact(reader_for):
    async def scenario():
        return await field.read_body("3", reader_for(b"abcdef"))
    assert asyncio.run(scenario()) == b"abc"
