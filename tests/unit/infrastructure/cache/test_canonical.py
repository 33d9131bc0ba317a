import pytest

from cloudcall.domain.models.request import ServiceDescriptor
from cloudcall.infrastructure.cache.canonical import canonical_descriptor, canonicalize, make_cache_key


def test_mapping_key_order_is_irrelevant():
    assert canonicalize({"b": 1, "a": {"y": 2, "x": 3}}) == canonicalize({"a": {"x": 3, "y": 2}, "b": 1})


def test_sequence_order_is_preserved():
    assert canonicalize([1, 2]) != canonicalize([2, 1])


def test_compact_sorted_output():
    assert canonicalize({"b": [3, 1], "a": None}) == '{"a":null,"b":[3,1]}'


def test_tuples_and_lists_serialize_alike():
    assert canonicalize({"k": (1, 2)}) == canonicalize({"k": [1, 2]})


def test_sets_are_ordered():
    assert canonicalize({"b", "a", "c"}) == canonicalize({"c", "a", "b"}) == '["a","b","c"]'


def test_bytes_and_unknown_objects_are_stable():
    class Marker:
        def __repr__(self):
            return "Marker()"

    assert canonicalize(b"\x01\xff") == '{"__bytes__":"01ff"}'
    assert canonicalize(Marker()) == '{"__type__":"Marker","repr":"Marker()"}'


def test_descriptor_param_order_is_irrelevant():
    first = ServiceDescriptor(name="S3", params={"region": "eu-west-1", "credentials": {"a": 1, "b": 2}})
    second = ServiceDescriptor(name="S3", params={"credentials": {"b": 2, "a": 1}, "region": "eu-west-1"})
    assert canonical_descriptor(first) == canonical_descriptor(second)


def test_descriptor_name_matters():
    assert canonical_descriptor(ServiceDescriptor("S3", {})) != canonical_descriptor(ServiceDescriptor("SQS", {}))


@pytest.mark.parametrize("parts,other", [
    (("a", "b"), ("b", "a")),
    (("a", "b"), ("a", "c")),
])
def test_cache_key_depends_on_parts_and_position(parts, other):
    assert make_cache_key(*parts) != make_cache_key(*other)


def test_cache_key_is_sha256_hex():
    key = make_cache_key("a", "b")
    assert len(key) == 64
    assert key == make_cache_key("a", "b")


def test_mapping_keys_compare_as_strings():
    assert canonicalize({1: "a"}) == canonicalize({"1": "a"}) == '{"1":"a"}'
    assert canonicalize({2: "b", "10": "a"}) == '{"10":"a","2":"b"}'
