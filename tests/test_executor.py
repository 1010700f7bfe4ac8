import httpx
import pytest
from pydantic import BaseModel, ValidationError

from fluentrest.domain.models import HttpMethod
from fluentrest.executor import Executor

URI = httpx.URL("http://dummy.uri:8080/things")


class Thing(BaseModel):
    id: int
    name: str


def _executor(transport, body=None, method=HttpMethod.POST) -> Executor:
    return Executor(transport, method, URI, body)


def test_header_appends_values(transport):
    request = _executor(transport).header("X-Trace", "1").header("X-Trace", "2").request()

    assert request.headers.get_list("X-Trace") == ["1", "2"]


def test_headers_merges_instead_of_replacing(transport):
    request = (
        _executor(transport)
        .header("X-A", "1")
        .headers({"x-a": "2", "X-B": ["3", "4"]})
        .headers(httpx.Headers([("X-C", "5")]))
        .headers(None)
        .request()
    )

    assert request.headers.get_list("X-A") == ["1", "2"]
    assert request.headers.get_list("X-B") == ["3", "4"]
    assert request.headers["X-C"] == "5"


def test_accept_charset_and_content_type_last_call_wins(transport):
    request = (
        _executor(transport)
        .accept("text/plain")
        .accept("application/json", "application/xml")
        .accept_charset("UTF-8")
        .content_type("text/plain")
        .content_type("application/json")
        .request()
    )

    assert request.headers.get_list("Accept") == ["application/json, application/xml"]
    assert request.headers["Accept-Charset"] == "utf-8"
    assert request.headers.get_list("Content-Type") == ["application/json"]


def test_request_descriptor_carries_method_uri_and_body(transport):
    request = _executor(transport, body={"a": 1}, method=HttpMethod.PUT).request()

    assert request.method is HttpMethod.PUT
    assert request.uri == URI
    assert request.body == {"a": 1}


def test_execute_without_type_discards_body(transport):
    transport.response = httpx.Response(200, json={"ignored": True}, headers={"X-Req": "abc"})

    entity = _executor(transport).execute()

    assert entity.status_code == 200
    assert entity.ok
    assert entity.body is None
    assert entity.headers["X-Req"] == "abc"
    assert len(transport.requests) == 1


def test_execute_decodes_text_json_and_models(transport):
    transport.response = httpx.Response(200, content=b'{"id": 1, "name": "widget"}')
    executor = _executor(transport)

    assert executor.execute(str).body == '{"id": 1, "name": "widget"}'
    assert executor.execute(bytes).body == b'{"id": 1, "name": "widget"}'
    assert executor.execute(dict).body == {"id": 1, "name": "widget"}
    assert executor.execute(Thing).body == Thing(id=1, name="widget")

    transport.response = httpx.Response(200, json=[1, 2, 3])
    assert executor.execute_for_object(list[int]) == [1, 2, 3]


def test_execute_for_object_returns_none_on_empty_body(transport):
    transport.response = httpx.Response(204)

    assert _executor(transport).execute_for_object(Thing) is None
    assert _executor(transport).execute_for_object() is None


def test_body_not_matching_type_raises_validation_error(transport):
    transport.response = httpx.Response(200, json={"not": "an int"})

    with pytest.raises(ValidationError):
        _executor(transport).execute(int)


def test_transport_errors_propagate_unchanged(transport):
    transport.response = httpx.ConnectError("connection refused")

    with pytest.raises(httpx.ConnectError, match="connection refused"):
        _executor(transport).execute()
