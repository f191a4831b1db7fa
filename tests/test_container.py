import pytest

from securelogin.container import Container, clear, get_instance, set_container


def test_get_instance_is_none_until_set():
    assert get_instance() is None


def test_set_then_get_returns_same_container():
    c = Container()
    assert set_container(c) is True
    assert get_instance() is c


def test_clear_resets_locator():
    set_container(Container())
    clear()
    assert get_instance() is None


def test_parameters_are_returned_as_stored():
    c = Container({"name": "login", "limits": [1, 2]})
    assert c["name"] == "login"
    assert c["limits"] == [1, 2]
    assert "name" in c
    assert set(c.keys()) == {"name", "limits"}


def test_services_are_built_once_and_see_the_container():
    c = Container()
    c["prefix"] = "db"
    c["service"] = lambda c: {"prefix": c["prefix"]}
    first = c["service"]
    assert first == {"prefix": "db"}
    assert c["service"] is first


def test_factory_builds_a_new_object_each_time():
    c = Container()
    c["conn"] = c.factory(lambda c: object())
    assert c["conn"] is not c["conn"]


def test_protect_stores_callable_as_parameter():
    c = Container()
    fn = c.protect(lambda x: x * 2)
    c["double"] = fn
    assert c["double"] is fn
    assert c["double"](4) == 8


def test_raw_returns_definition_without_calling_it():
    c = Container()
    fn = lambda c: "built"
    c["svc"] = fn
    assert c.raw("svc") is fn


def test_redefining_a_service_drops_cached_instance():
    c = Container()
    c["svc"] = lambda c: "old"
    assert c["svc"] == "old"
    c["svc"] = lambda c: "new"
    assert c["svc"] == "new"


def test_unknown_key_raises_key_error():
    c = Container()
    with pytest.raises(KeyError, match="missing"):
        c["missing"]
    with pytest.raises(KeyError):
        c.raw("missing")


def test_delete_removes_definition():
    c = Container({"a": 1})
    del c["a"]
    assert "a" not in c


def test_factory_and_protect_reject_non_callables():
    c = Container()
    with pytest.raises(TypeError):
        c.factory("nope")
    with pytest.raises(TypeError):
        c.protect(42)


def test_deleting_one_key_keeps_factory_mark_on_the_other():
    c = Container()
    fn = c.factory(lambda c: object())
    c["a"] = fn
    c["b"] = fn
    del c["a"]
    assert c["b"] is not c["b"]


def test_deleting_one_key_keeps_protect_mark_on_the_other():
    c = Container()
    fn = c.protect(lambda: "called")
    c["a"] = fn
    c["b"] = fn
    del c["a"]
    assert c["b"] is fn
