from __future__ import annotations

import json
import pathlib
from typing import Any, Callable, Dict, Optional, Union

from elements import END, START, Element, KeyFn, Sentinel, T, Value
from transition_graph import KeyCollisionError, TransitionGraph

START_LITERAL = "start"
END_LITERAL = "end"
RESERVED = (START_LITERAL, END_LITERAL)

Document = Dict[str, Dict[str, int]]


class EncodeError(ValueError):
    """A payload cannot be written without clashing with another key."""


class DecodeError(ValueError):
    """A serialized model does not have the expected shape."""


def _identity(text: str) -> Any:
    return text


def encode(graph: TransitionGraph[T], to_str: Callable[[T], str] = str) -> Document:
    """Nested ``{from: {to: count}}`` document with string keys.

    START and END are written as "start" and "end". Payloads go through
    ``to_str``; a payload that stringifies to a reserved literal, or two
    payloads that stringify identically, raise EncodeError.
    """
    names: Dict[str, Element] = {}

    def name_of(element: Element) -> str:
        name = element_name(element, to_str)
        if isinstance(element, Sentinel):
            return name
        if not isinstance(name, str):
            raise EncodeError(f"Stringifier returned {type(name).__name__} for {element.payload!r}")
        if name in RESERVED:
            raise EncodeError(f"Payload {element.payload!r} stringifies to reserved key {name!r}")
        seen = names.setdefault(name, element)
        if seen != element:
            raise EncodeError(f"Payloads {seen.payload!r} and {element.payload!r} both stringify to {name!r}")
        return name

    doc: Document = {}
    for from_el, to_el, count in graph.transitions():
        doc.setdefault(name_of(from_el), {})[name_of(to_el)] = count
    return doc


def decode(
    doc: Any,
    parse: Callable[[str], T] = _identity,
    key: Optional[KeyFn] = None,
) -> TransitionGraph[T]:
    """Rebuild a graph from ``encode`` output.

    ``parse`` turns payload strings back into tokens and ``key`` is the key
    mapping the graph was built with. Raises DecodeError on malformed input.
    """
    if not isinstance(doc, dict):
        raise DecodeError(f"Expected an object at top level, got {type(doc).__name__}")

    parsed: Dict[str, Element] = {}

    def element_of(name: Any) -> Element:
        if not isinstance(name, str):
            raise DecodeError(f"Expected string keys, got {type(name).__name__}")
        if name == START_LITERAL:
            return START
        if name == END_LITERAL:
            return END
        if name not in parsed:
            try:
                parsed[name] = Value(parse(name))
            except (ValueError, TypeError) as e:
                raise DecodeError(f"Could not parse payload {name!r}: {e}") from e
        return parsed[name]

    graph: TransitionGraph[T] = TransitionGraph(key)
    for from_name, row in doc.items():
        from_el = element_of(from_name)
        if not isinstance(row, dict):
            raise DecodeError(f"Expected an object of counts under {from_name!r}, got {type(row).__name__}")
        for to_name, count in row.items():
            to_el = element_of(to_name)
            # bool is an int subclass but never a count
            if isinstance(count, bool) or not isinstance(count, int):
                raise DecodeError(
                    f"Expected an integer count for {from_name!r} -> {to_name!r}, got {count!r}"
                )
            if count < 0:
                raise DecodeError(f"Expected a non-negative count for {from_name!r} -> {to_name!r}, got {count}")
            try:
                graph.load_count(from_el, to_el, count)
            except KeyCollisionError as e:
                raise DecodeError(str(e)) from e
    return graph


def dumps(graph: TransitionGraph[T], to_str: Callable[[T], str] = str, *, indent: Optional[int] = None) -> str:
    return json.dumps(encode(graph, to_str), indent=indent, ensure_ascii=False)


def loads(text: str, parse: Callable[[str], T] = _identity, key: Optional[KeyFn] = None) -> TransitionGraph[T]:
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Expected JSON text: {e}") from e
    return decode(doc, parse, key)


def save(
    graph: TransitionGraph[T],
    path: Union[str, pathlib.Path],
    to_str: Callable[[T], str] = str,
) -> pathlib.Path:
    path = pathlib.Path(path)
    path.write_text(dumps(graph, to_str, indent=2), encoding="utf-8")
    return path


def load(
    path: Union[str, pathlib.Path],
    parse: Callable[[str], T] = _identity,
    key: Optional[KeyFn] = None,
) -> TransitionGraph[T]:
    return loads(pathlib.Path(path).read_text(encoding="utf-8"), parse, key)


def element_name(element: Element, to_str: Callable[[Any], str] = str) -> str:
    """String form of a single element, as used for document keys."""
    if isinstance(element, Sentinel):
        return START_LITERAL if element is START else END_LITERAL
    return to_str(element.payload)
