from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set

from elements import Element, TaggedKey, Value
from samplers import WeightedSampler
from sequence_generator import generate
from sequence_trainer import train, train_batch
from serializer import dumps, loads
from transition_graph import TransitionGraph

CHAR_KEY = TaggedKey()


def split_words(text: str) -> List[str]:
    """Whitespace-separated words. Casing and filtering are left to the caller."""
    return text.split()


def _parse_char(text: str) -> str:
    if len(text) != 1:
        raise ValueError(f"Expected a single character, got {text!r}")
    return text


def _char(element) -> Element:
    if isinstance(element, str):
        return Value(_parse_char(element))
    return element


@dataclass
class CharMarkov:
    """Character-level chain for generating words.

    Each training word is one sequence of characters; generated words are
    joined back into strings.
    """

    graph: TransitionGraph[str] = field(default_factory=lambda: TransitionGraph(CHAR_KEY))

    @classmethod
    def from_words(cls, words: Iterable[str]) -> "CharMarkov":
        model = cls()
        model.train_words(words)
        return model

    @classmethod
    def from_text(cls, text: str) -> "CharMarkov":
        return cls.from_words(split_words(text))

    def train_word(self, word: str) -> "CharMarkov":
        train(word, self.graph)
        return self

    def train_words(self, words: Iterable[str], *, progress: bool = False) -> "CharMarkov":
        train_batch(words, self.graph, progress=progress)
        return self

    def generate_word(self, max_length: int = 20, sampler: Optional[WeightedSampler] = None) -> str:
        return "".join(generate(self.graph, max_length, sampler))

    def generate_words(self, count: int, max_length: int = 20, sampler: Optional[WeightedSampler] = None) -> List[str]:
        return [self.generate_word(max_length, sampler) for _ in range(count)]

    def probability(self, from_char, to_char) -> float:
        """P(to | from). Plain characters are accepted alongside START/END."""
        return self.graph.probability(_char(from_char), _char(to_char))

    @property
    def alphabet(self) -> Set[str]:
        return self.graph.alphabet()

    def to_json(self, indent: Optional[int] = None) -> str:
        return dumps(self.graph, indent=indent)

    @classmethod
    def from_json(cls, text: str) -> "CharMarkov":
        return cls(graph=loads(text, parse=_parse_char, key=CHAR_KEY))


def _demo_round_trip(words: List[str]) -> None:
    """Internal quick check used by the tests.

    Trains on ``words`` and verifies the JSON form decodes to the same graph.
    """
    model = CharMarkov.from_words(words)
    recovered = CharMarkov.from_json(model.to_json())
    assert recovered.graph == model.graph


if __name__ == "__main__":
    import pathlib

    corpus_path = pathlib.Path("words.txt")
    if not corpus_path.exists():
        raise SystemExit("words.txt not found. Please place a word list in the repo root.")

    corpus_text = corpus_path.read_text(encoding="utf-8")
    model = CharMarkov.from_text(corpus_text.lower())

    print("[CharMarkov]")
    print(f"Corpus words: {len(split_words(corpus_text)):,}")
    print(f"Alphabet size: {len(model.alphabet)}")
    print(f"Distinct transitions: {model.graph.num_transitions:,}")
    print("Sample words:", model.generate_words(8, max_length=12))
