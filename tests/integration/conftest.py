from __future__ import annotations

import logging
from pathlib import Path

import pytest
from sklearn.utils import check_random_state

VOCABULARIES = {
    0: ["meeting", "agenda", "project", "deadline", "report", "team", "review", "schedule"],
    1: ["winner", "prize", "cash", "free", "offer", "claim", "cheap", "pills"],
    2: ["newsletter", "issue", "weekly", "digest", "subscribe", "articles", "edition", "read"],
}
FILLER = ["the", "a", "for", "and", "your", "this", "with", "today"]


def build_corpus(documents_per_class: int = 30, seed: int = 0) -> list[tuple[int, str]]:
    """Deterministic labelled documents: class words mixed with shared filler."""

    rng = check_random_state(seed)
    lines: list[tuple[int, str]] = []
    for label, words in VOCABULARIES.items():
        for _ in range(documents_per_class):
            chosen = list(rng.choice(words, size=4, replace=False))
            chosen += list(rng.choice(FILLER, size=2, replace=False))
            rng.shuffle(chosen)
            lines.append((label, " ".join(chosen)))
    return lines


@pytest.fixture
def corpus_file(tmp_path: Path) -> Path:
    path = tmp_path / "corpus.tsv"
    path.write_text(
        "".join(f"{label}\t{text}\n" for label, text in build_corpus()),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def binary_corpus_file(tmp_path: Path) -> Path:
    path = tmp_path / "binary.tsv"
    path.write_text(
        "".join(f"{label}\t{text}\n" for label, text in build_corpus() if label < 2),
        encoding="utf-8",
    )
    return path


@pytest.fixture(autouse=True)
def _isolated_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
