"""Tokenisation and loading of labelled text corpora.

A corpus file holds one document per line as ``label<TAB>text``. Labels are
numeric class ids; blank lines and lines starting with ``#`` are ignored.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path

LOGGER = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r"[^\W_]+(?:'[^\W_]+)?")


class CorpusError(ValueError):
    """Raised when a corpus file cannot be parsed."""


def tokenize(text: str) -> list[str]:
    """Lower-case word tokens of ``text``."""

    return TOKEN_PATTERN.findall(text.lower())


def load_corpus(path: Path | str) -> dict[float, list[list[str]]]:
    """Read a labelled corpus into ``{class_id: [tokenised documents]}``."""

    corpus_path = Path(path).expanduser()
    if not corpus_path.is_file():
        raise CorpusError(f"Corpus file not found: {corpus_path}")
    with corpus_path.open("r", encoding="utf-8") as handle:
        training_set = parse_corpus(handle, source=str(corpus_path))
    LOGGER.info(
        "Loaded %d document(s) in %d class(es) from %s",
        sum(len(documents) for documents in training_set.values()),
        len(training_set),
        corpus_path,
    )
    return training_set


def parse_corpus(lines: Iterable[str], *, source: str = "<corpus>") -> dict[float, list[list[str]]]:
    training_set: dict[float, list[list[str]]] = {}
    for number, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        label_text, separator, text = stripped.partition("\t")
        if not separator:
            raise CorpusError(f"{source}:{number}: expected 'label<TAB>text'")
        try:
            label = float(label_text)
        except ValueError as exc:
            raise CorpusError(f"{source}:{number}: label must be numeric, got {label_text!r}") from exc
        words = tokenize(text)
        if not words:
            LOGGER.warning("%s:%d: document has no words, skipping", source, number)
            continue
        training_set.setdefault(label, []).append(words)
    if not training_set:
        raise CorpusError(f"{source}: corpus contains no documents")
    return training_set


__all__ = ["CorpusError", "load_corpus", "parse_corpus", "tokenize"]
