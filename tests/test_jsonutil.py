import pytest

from ckpool.jsonutil import json_array_string, json_object_dup


def test_array_string_returns_element():
    assert json_array_string(["a", "b", "c"], 1) == "b"


@pytest.mark.parametrize("value", [None, {"0": "a"}, "abc", 5])
def test_array_string_non_array(value):
    assert json_array_string(value, 0) is None


@pytest.mark.parametrize("entry", [2, 3, 100, -1])
def test_array_string_out_of_range(entry):
    assert json_array_string(["a", "b"], entry) is None


@pytest.mark.parametrize("item", [1, 2.5, None, True, ["x"], {"k": "v"}])
def test_array_string_non_string_element(item):
    assert json_array_string([item], 0) is None


def test_array_string_empty_string_element():
    assert json_array_string([""], 0) == ""


def test_object_dup_returns_equal_copy():
    inner = {"x": 1, "y": [1, 2]}
    doc = {"params": inner}
    dup = json_object_dup(doc, "params")
    assert dup == inner
    assert dup is not inner
    dup["x"] = 99
    assert inner["x"] == 1


def test_object_dup_list_is_copied():
    doc = {"items": [1, 2, 3]}
    dup = json_object_dup(doc, "items")
    dup.append(4)
    assert doc["items"] == [1, 2, 3]
    assert dup == [1, 2, 3, 4]


def test_object_dup_scalar():
    assert json_object_dup({"n": 42, "s": "text"}, "s") == "text"
    assert json_object_dup({"n": 42}, "n") == 42


def test_object_dup_missing_key():
    assert json_object_dup({"a": 1}, "b") is None


@pytest.mark.parametrize("value", [None, [1, 2], "a", 3])
def test_object_dup_non_object(value):
    assert json_object_dup(value, "a") is None