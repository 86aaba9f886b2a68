import json
import threading

import pytest

from optin_client.core.http_client import HttpResponse
from optin_client.responses.action import Action
from optin_client.responses.envelope import ResponseEnvelope
from optin_client.responses.errors import DecodeError, MissingFieldError, NoDecodedBodyError, NoResultError


class CountingResponse:
    """Snapshot whose body() may be read only once."""

    def __init__(self, status_code=200, payload=None, content_type="application/json", text=None):
        self.status_code = status_code
        self.headers = {"Content-Type": content_type} if content_type is not None else {}
        self.text = text if text is not None else json.dumps(payload)
        self.reads = 0

    def get_header(self, name):
        for k, v in self.headers.items():
            if k.lower() == name.lower():
                return v
        return None

    def body(self):
        self.reads += 1
        if self.reads > 1:
            raise AssertionError("body read twice")
        return self.text


def envelope(status_code=200, payload=None, content_type="application/json"):
    return ResponseEnvelope(HttpResponse(status_code, {"Content-Type": content_type}, json.dumps(payload)))


@pytest.mark.parametrize("status,fails", [(100, False), (200, False), (204, False), (299, False), (300, True), (404, True), (422, True), (500, True)])
def test_fails_is_status_at_least_300(status, fails):
    r = CountingResponse(status_code=status, payload={})
    env = ResponseEnvelope(r)
    assert env.fails() is fails
    assert env.status_code == status
    assert r.reads == 0


def test_construction_does_not_read_body():
    r = CountingResponse(payload={"data": {}})
    ResponseEnvelope(r)
    assert r.reads == 0


def test_decode_happens_once():
    r = CountingResponse(payload={"data": [{"hash": "a"}], "meta": {"page": 1}})
    env = ResponseEnvelope(r)
    env.data()
    env.meta()
    env.all()
    env.action()
    assert r.reads == 1


def test_decode_failure_is_cached():
    r = CountingResponse(text="{not json")
    env = ResponseEnvelope(r)
    with pytest.raises(DecodeError):
        env.data()
    with pytest.raises(DecodeError):
        env.error_message()
    assert r.reads == 1


def test_repeated_decode_error_is_fresh_and_chained():
    env = ResponseEnvelope(CountingResponse(text="{not json"))
    with pytest.raises(DecodeError) as first:
        env.data()
    with pytest.raises(DecodeError) as second:
        env.meta()
    assert first.value is not second.value
    assert isinstance(first.value.__cause__, json.JSONDecodeError)
    assert second.value.__cause__ is first.value.__cause__
    assert str(second.value) == str(first.value)


def test_concurrent_access_decodes_once():
    r = CountingResponse(payload={"data": {"hash": "a"}})
    env = ResponseEnvelope(r)
    errors = []

    def worker():
        try:
            env.data()
        except AssertionError as e:  # pragma: no cover
            errors.append(e)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert errors == []
    assert r.reads == 1


@pytest.mark.parametrize("content_type", ["application/json; charset=utf-8", "text/json", "Application/JSON", "text/html", None])
def test_non_exact_content_type_is_not_decoded(content_type):
    r = CountingResponse(status_code=400, payload={"data": {}, "meta": {}, "message": "x"}, content_type=content_type)
    env = ResponseEnvelope(r)
    with pytest.raises(NoResultError):
        env.data()
    with pytest.raises(NoResultError):
        env.meta()
    with pytest.raises(NoResultError, match="No result from server"):
        env.error_message()
    assert r.reads == 0


def test_no_decoded_body_error_is_no_result_error():
    assert NoDecodedBodyError is NoResultError


def test_content_type_header_lookup_is_case_insensitive():
    env = ResponseEnvelope(HttpResponse(200, {"content-type": "application/json"}, '{"data": {"hash": "h"}}'))
    assert env.data() == {"hash": "h"}


def test_all_on_list():
    x, y = {"hash": "h1", "action": "register"}, {"hash": "h2", "action": "confirm"}
    env = envelope(payload={"data": [x, y]})
    assert env.all() == [Action.from_object(x), Action.from_object(y)]


def test_all_on_single():
    x = {"hash": "h1", "action": "register"}
    env = envelope(payload={"data": x})
    assert env.all() == [Action.from_object(x)]


def test_all_on_empty_list():
    assert envelope(payload={"data": []}).all() == []


def test_action_on_single():
    x = {"hash": "h1", "scope": "newsletter", "action": "register"}
    act = envelope(payload={"data": x}).action()
    assert act == Action.from_object(x)
    assert act.scope == "newsletter"


def test_action_on_list_of_one_is_none():
    assert envelope(payload={"data": [{"hash": "h1"}]}).action() is None


def test_meta_returned_unchanged():
    meta = {"pagination": {"total": 2, "count": 2, "links": []}}
    assert envelope(payload={"data": [], "meta": meta}).meta() == meta


def test_missing_data_and_meta():
    env = envelope(payload={"something": 1})
    with pytest.raises(MissingFieldError) as exc:
        env.data()
    assert exc.value.field == "data"
    with pytest.raises(MissingFieldError) as exc:
        env.meta()
    assert exc.value.field == "meta"


def test_non_object_body_has_no_data():
    with pytest.raises(MissingFieldError):
        envelope(payload=[1, 2]).data()


def test_error_message_structured():
    env = envelope(status_code=400, payload={"error": {"message": "Bad", "code": "E1"}})
    assert env.error_message() == "Bad (E1)"


def test_error_message_structured_ignores_flat_fields():
    env = envelope(status_code=401, payload={"error": {"message": "Unauthorized", "code": 401}, "message": "other"})
    assert env.error_message() == "Unauthorized (401)"


def test_error_message_validation_errors_fixed_order():
    payload = {"message": "Invalid", "errors": {"scope": ["s1"], "unknown": ["u"], "hash": ["h1", "h2"]}}
    env = envelope(status_code=422, payload=payload)
    assert env.error_message() == "Invalid (422)\n  hash: h1, h2\n  scope: s1"


def test_error_message_all_attributes():
    payload = {"message": "Invalid", "errors": {"data": ["d"], "scope": ["s"], "hash": ["h"], "action": ["a"]}}
    env = envelope(status_code=422, payload=payload)
    assert env.error_message() == "Invalid (422)\n  action: a\n  hash: h\n  scope: s\n  data: d"


def test_error_message_flat_without_errors():
    assert envelope(status_code=404, payload={"message": "Not found"}).error_message() == "Not found (404)"


def test_error_message_without_message():
    with pytest.raises(MissingFieldError) as exc:
        envelope(status_code=500, payload={"errors": {"hash": ["x"]}}).error_message()
    assert exc.value.field == "message"


def test_limiter_built_from_headers():
    resp = HttpResponse(200, {"Content-Type": "application/json", "X-RateLimit-Limit": "60", "X-RateLimit-Remaining": "59"}, "{}")
    env = ResponseEnvelope(resp)
    assert env.limiter().limit == 60
    assert env.limiter().remaining == 59
    assert env.limiter() is env.limiter()


def test_null_data_is_a_single_record():
    env = envelope(payload={"data": None})
    assert env.data() is None
    assert env.all() == [Action()]
    assert env.action() == Action()


def test_literal_null_body_is_no_result():
    r = CountingResponse(status_code=500, text="null")
    env = ResponseEnvelope(r)
    with pytest.raises(NoResultError):
        env.data()
    with pytest.raises(NoResultError, match="No result from server"):
        env.error_message()
    assert r.reads == 1


def test_null_error_uses_flat_message():
    env = envelope(status_code=410, payload={"error": None, "message": "Gone", "errors": {"hash": ["expired"]}})
    assert env.error_message() == "Gone (410)\n  hash: expired"
