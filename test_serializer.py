import json

import pytest

from elements import END, START, TaggedKey, Value
from sequence_trainer import train, train_batch
from serializer import DecodeError, EncodeError, decode, dumps, element_name, encode, load, loads, save
from transition_graph import TransitionGraph


def test_encode_matches_documented_example():
    g = train("ab", TransitionGraph())
    assert encode(g) == {
        "start": {"a": 1},
        "a": {"b": 1},
        "b": {"end": 1},
    }


def test_round_trip_strings():
    g = train_batch([list(w) for w in ["abc", "abd", "bca", "a"]], TransitionGraph())
    assert decode(encode(g)) == g


def test_round_trip_ints():
    g = train_batch([[1, 2, 3], [3, 2, 1], [2, 2]], TransitionGraph())
    back = decode(encode(g), parse=int, key=TaggedKey())
    assert back == g
    assert back.alphabet() == {1, 2, 3}
    assert back.probability(Value(2), Value(2)) == g.probability(Value(2), Value(2))


def test_empty_graph_round_trip():
    assert encode(TransitionGraph()) == {}
    assert decode({}) == TransitionGraph()


def test_encode_is_deterministic():
    words = [list(w) for w in ["tomato", "potato", "tornado"]]
    a = train_batch(words, TransitionGraph())
    b = train_batch(words, TransitionGraph())
    assert dumps(a) == dumps(b)


def test_reserved_payload_rejected():
    g = train(["start"], TransitionGraph())
    with pytest.raises(EncodeError):
        encode(g)


def test_lossy_stringifier_rejected():
    g = train([1, 1.5], TransitionGraph())
    with pytest.raises(EncodeError):
        encode(g, to_str=lambda x: str(int(x)))


@pytest.mark.parametrize(
    "doc",
    [
        [],
        "start",
        42,
        {"start": ["a"]},
        {"start": {"a": "1"}},
        {"start": {"a": 1.0}},
        {"start": {"a": True}},
        {"start": {"a": -2}},
        {"start": {"a": None}},
    ],
)
def test_malformed_documents(doc):
    with pytest.raises(DecodeError):
        decode(doc)


def test_decode_error_describes_expectation():
    try:
        decode({"a": {"b": "x"}})
        assert False, "Expected DecodeError for string count"
    except DecodeError as e:
        assert "integer" in str(e)


def test_parser_failure_becomes_decode_error():
    with pytest.raises(DecodeError):
        decode({"start": {"x": 1}}, parse=int)


def test_zero_counts_are_dropped():
    g = decode({"start": {"a": 1, "b": 0}, "a": {"end": 1}})
    assert g.get_count(START, Value("b")) == 0
    assert g.alphabet() == {"a"}
    assert g.probability(START, Value("a")) == 1.0


def test_invalid_json_text():
    with pytest.raises(DecodeError):
        loads("{not json")


def test_loads_dumps_and_files(tmp_path):
    g = train_batch([list("héllo"), list("hé")], TransitionGraph())
    assert loads(dumps(g)) == g
    path = save(g, tmp_path / "model.json")
    assert json.loads(path.read_text(encoding="utf-8"))["start"] == {"h": 2}
    back = load(path)
    assert back == g
    assert back.probability(Value("é"), END) == 0.5


def test_element_name_and_stringifier_checks():
    assert element_name(START) == "start"
    assert element_name(END) == "end"
    assert element_name(Value(7), to_str=hex) == "0x7"
    g = train([1, 2], TransitionGraph())
    assert encode(g, to_str=hex) == {"start": {"0x1": 1}, "0x1": {"0x2": 1}, "0x2": {"end": 1}}
    with pytest.raises(EncodeError):
        encode(g, to_str=lambda x: x)
