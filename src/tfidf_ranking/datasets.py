"""Corpus sources backed by Hugging Face datasets."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from datasets import load_dataset

from tfidf_ranking.normalize import tokenize


def iter_documents(dataset: Iterable[dict], text_field: str = "content", id_field: str = "id") -> Iterator[tuple[str, list[str]]]:
    """
    Yield (doc_id, raw tokens) for each record of a dataset.

    Args:
        dataset: Any iterable of mappings, e.g. a datasets.Dataset split.
        text_field: Field holding the document text.
        id_field: Field holding the document ID.
    """
    for record in dataset:
        yield record[id_field], tokenize(record[text_field])


def load_documents(
    name: str,
    split: str,
    config_name: str | None = None,
    text_field: str = "content",
    id_field: str = "id",
) -> list[tuple[str, list[str]]]:
    """Load a dataset split from the Hugging Face hub as (doc_id, tokens) pairs."""
    dataset = load_dataset(name, config_name, split=split)
    return list(iter_documents(dataset, text_field=text_field, id_field=id_field))
