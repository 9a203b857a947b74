"""
Read-only scripture corpus.

The corpus is a JSON array shipped with the package. It is loaded once at
startup and never written back.
"""

import json
import logging
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import overload

from pydantic import TypeAdapter, ValidationError

from .models import QuoteRecord

logger = logging.getLogger(__name__)

DEFAULT_CORPUS_PATH = Path(__file__).parent / "data" / "mood_data.json"

_records_adapter = TypeAdapter(list[QuoteRecord])


class CorpusError(Exception):
    """The corpus file is missing or malformed."""


class Corpus(Sequence[QuoteRecord]):
    """Immutable, ordered collection of quote records."""

    def __init__(self, records: Sequence[QuoteRecord]) -> None:
        self._records = tuple(records)

    @overload
    def __getitem__(self, index: int) -> QuoteRecord: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[QuoteRecord]: ...

    def __getitem__(self, index):
        return self._records[index]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[QuoteRecord]:
        return iter(self._records)

    def __repr__(self) -> str:
        return f"Corpus({len(self._records)} records)"


def load_corpus(path: Path | str | None = None) -> Corpus:
    """
    Load and validate the corpus file.

    Args:
        path: JSON file to read; the packaged corpus when omitted

    Returns:
        The loaded Corpus

    Raises:
        CorpusError: If the file cannot be read or does not validate
    """
    corpus_path = Path(path) if path is not None else DEFAULT_CORPUS_PATH
    try:
        raw = json.loads(corpus_path.read_text(encoding="utf-8"))
        records = _records_adapter.validate_python(raw)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        raise CorpusError(f"Could not load corpus from {corpus_path}: {e}") from e

    logger.info("Loaded %d records from %s", len(records), corpus_path)
    return Corpus(records)
