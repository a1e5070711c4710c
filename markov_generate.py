from __future__ import annotations

import argparse
import pathlib
from dataclasses import dataclass
from typing import List, Optional

from chain_stats import perplexity, top_transitions, transition_entropy
from elements import START, TaggedKey
from samplers import SAMPLER_KINDS, make_sampler
from sequence_generator import generate_many
from sequence_trainer import train_batch
from serializer import DecodeError, EncodeError, element_name, load, save
from transition_graph import TransitionGraph

LEVELS = ("char", "word")


@dataclass
class GenerateConfig:
    corpus: Optional[str] = None
    model: str = "markov_model.json"
    level: str = "char"
    count: int = 10
    max_length: int = 20
    sampler: str = "random"
    seed: Optional[int] = 42
    top: int = 10
    progress: bool = True


def read_sequences(corpus_path: pathlib.Path, level: str) -> List[List[str]]:
    """Char level: every word is a sequence of characters. Word level: every line is a sequence of words."""
    if not corpus_path.exists():
        raise SystemExit(f"Corpus not found: {corpus_path}")
    text = corpus_path.read_text(encoding="utf-8")
    if level == "char":
        return [list(word) for word in text.split()]
    return [line.split() for line in text.splitlines() if line.strip()]


def join_sample(tokens: List[str], level: str) -> str:
    return "".join(tokens) if level == "char" else " ".join(tokens)


def load_model(cfg: GenerateConfig) -> TransitionGraph[str]:
    model_path = pathlib.Path(cfg.model)
    if not model_path.exists():
        raise SystemExit(f"Model not found: {model_path}")
    try:
        return load(model_path, key=TaggedKey())
    except DecodeError as e:
        raise SystemExit(f"Could not read model {model_path}: {e}")


def cmd_train(cfg: GenerateConfig) -> None:
    if cfg.corpus is None:
        raise SystemExit("--corpus is required for training")
    sequences = read_sequences(pathlib.Path(cfg.corpus), cfg.level)
    print("[Markov Chain]")
    print(f"Corpus sequences: {len(sequences):,} ({cfg.level} level)")

    graph: TransitionGraph[str] = TransitionGraph(TaggedKey())
    train_batch(sequences, graph, progress=cfg.progress)
    print(f"Alphabet size: {len(graph.alphabet())}")
    print(f"Distinct transitions: {graph.num_transitions:,}")

    try:
        path = save(graph, cfg.model)
    except EncodeError as e:
        raise SystemExit(f"Cannot write model: {e}")
    print(f"Model saved to {path}")


def cmd_generate(cfg: GenerateConfig) -> None:
    graph = load_model(cfg)
    sampler = make_sampler(cfg.sampler, cfg.seed)
    samples = generate_many(graph, cfg.count, cfg.max_length, sampler)
    for i, tokens in enumerate(samples):
        print(f"{i + 1}\t{join_sample(tokens, cfg.level)}")


def cmd_stats(cfg: GenerateConfig) -> None:
    graph = load_model(cfg)
    print("[Model Stats]")
    print(f"Alphabet size: {len(graph.alphabet())}")
    print(f"Distinct transitions: {graph.num_transitions:,}")
    print(f"Total transitions: {graph.total_count:,}")
    print(f"Start entropy (nats): {transition_entropy(graph, START):.4f}")
    print(f"Top-{cfg.top} transitions (from, to, count):")
    for from_el, to_el, count in top_transitions(graph, cfg.top):
        print(f"  {element_name(from_el)!r} -> {element_name(to_el)!r}\t{count}")

    if cfg.corpus is not None:
        sequences = read_sequences(pathlib.Path(cfg.corpus), cfg.level)
        try:
            ppl = perplexity(graph, sequences)
        except ValueError as e:
            raise SystemExit(str(e))
        print(f"Corpus perplexity: {ppl:.4f}")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Train, sample and inspect bigram Markov chains.")
    sub = p.add_subparsers(dest="command", required=True)

    def common(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("--model", type=str, default="markov_model.json")
        sp.add_argument("--level", choices=LEVELS, default="char")

    sp = sub.add_parser("train", help="train a model on a corpus file")
    common(sp)
    sp.add_argument("--corpus", type=str, required=True)
    sp.add_argument("--no-progress", action="store_true")

    sp = sub.add_parser("generate", help="sample sequences from a model")
    common(sp)
    sp.add_argument("--count", type=int, default=10)
    sp.add_argument("--max-length", type=int, default=20)
    sp.add_argument("--sampler", choices=SAMPLER_KINDS, default="random")
    sp.add_argument("--seed", type=int, default=42)

    sp = sub.add_parser("stats", help="summarize a model, optionally scoring a corpus")
    common(sp)
    sp.add_argument("--corpus", type=str, default=None)
    sp.add_argument("--top", type=int, default=10)
    return p


def config_from_args(args: argparse.Namespace) -> GenerateConfig:
    cfg = GenerateConfig(model=args.model, level=args.level)
    cfg.corpus = getattr(args, "corpus", None)
    cfg.progress = not getattr(args, "no_progress", False)
    for name in ("count", "max_length", "sampler", "seed", "top"):
        if hasattr(args, name):
            setattr(cfg, name, getattr(args, name))
    for flag, value in (("--count", cfg.count), ("--max-length", cfg.max_length), ("--top", cfg.top)):
        if value < 0:
            raise SystemExit(f"{flag} must be non-negative, got {value}")
    return cfg


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    cfg = config_from_args(args)
    if args.command == "train":
        cmd_train(cfg)
    elif args.command == "generate":
        cmd_generate(cfg)
    else:
        cmd_stats(cfg)


if __name__ == "__main__":
    main()
