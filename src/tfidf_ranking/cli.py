"""
Score a corpus of text files and write one TF-IDF table per document.

Run with:
    tfidf-rank --input-dir corpus/ --output-dir scores/ --num-docs 5
    tfidf-rank --input-dir corpus/ --discover --top-k 10
    tfidf-rank --hf-dataset xlangai/BRIGHT --hf-config documents --hf-split biology

Defaults can be set through environment variables (see tfidf_ranking.config).
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from tqdm import tqdm

from tfidf_ranking.config import (
    DEFAULT_INPUT_DIR,
    DEFAULT_INPUT_PATTERN,
    DEFAULT_LOG_LEVEL,
    DEFAULT_NUM_DOCS,
    DEFAULT_ON_ERROR,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_OUTPUT_PATTERN,
    ON_ERROR_CHOICES,
    RunConfig,
)
from tfidf_ranking.corpus_io import DocumentStore, default_doc_ids
from tfidf_ranking.datasets import load_documents
from tfidf_ranking.errors import CorpusIOError, TFIDFError
from tfidf_ranking.index import DocumentID
from tfidf_ranking.tfidf import TFIDF

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Compute per-document TF-IDF term scores for a fixed corpus.")
    parser.add_argument("--input-dir", default=DEFAULT_INPUT_DIR, help="Directory holding the documents.")
    parser.add_argument("--output-dir", default=DEFAULT_OUTPUT_DIR, help="Directory receiving the score tables.")
    parser.add_argument(
        "--input-pattern", default=DEFAULT_INPUT_PATTERN, help="Input filename, '{}' is the document ID (default: doc{}.txt)."
    )
    parser.add_argument(
        "--output-pattern", default=DEFAULT_OUTPUT_PATTERN, help="Output filename, '{}' is the document ID (default: doc{}.csv)."
    )

    corpus = parser.add_mutually_exclusive_group()
    corpus.add_argument("--docs", nargs="+", metavar="ID", help="Explicit, ordered list of document IDs.")
    corpus.add_argument("--discover", action="store_true", help="Use every input file matching --input-pattern.")
    parser.add_argument(
        "--num-docs", type=int, default=DEFAULT_NUM_DOCS, help=f"Corpus is documents 1..N (default: {DEFAULT_NUM_DOCS})."
    )

    parser.add_argument("--hf-dataset", help="Read the corpus from a Hugging Face dataset instead of files.")
    parser.add_argument("--hf-config", default=None, help="Dataset configuration name.")
    parser.add_argument("--hf-split", default="train", help="Dataset split (default: train).")
    parser.add_argument("--text-field", default="content", help="Dataset field holding the text.")
    parser.add_argument("--id-field", default="id", help="Dataset field holding the document ID.")

    parser.add_argument("--top-k", type=int, default=None, help="Log the K best keywords of each document.")
    parser.add_argument(
        "--on-error",
        choices=ON_ERROR_CHOICES,
        default=DEFAULT_ON_ERROR,
        help="abort the run on the first I/O failure, or skip the failing document.",
    )
    parser.add_argument("--log-level", default=DEFAULT_LOG_LEVEL, help="Logging level (default: INFO).")
    return parser


def _corpus_ids(config: RunConfig, store: DocumentStore) -> list[DocumentID]:
    if config.doc_ids:
        return list(config.doc_ids)
    if config.discover:
        return store.discover()
    return default_doc_ids(config.num_docs)


def read_corpus(config: RunConfig, store: DocumentStore) -> list[tuple[DocumentID, list[str]]]:
    """Read every document of the corpus, applying the on-error policy."""
    documents = []
    for doc_id in tqdm(_corpus_ids(config, store), desc="Reading documents", disable=None):
        try:
            documents.append((doc_id, store.read(doc_id)))
        except CorpusIOError as e:
            if config.on_error == "abort":
                raise
            logger.warning("Skipping document %s: %s", doc_id, e)
    return documents


def score_corpus(
    documents: list[tuple[DocumentID, list[str]]],
    store: DocumentStore,
    config: RunConfig,
) -> dict[DocumentID, Path]:
    """Index, score and write every document. Returns the written paths."""
    if not documents:
        raise CorpusIOError("No readable documents in the corpus")

    run = TFIDF([doc_id for doc_id, _ in documents])
    for doc_id, tokens in tqdm(documents, desc="Indexing", disable=None):
        run.add_document(doc_id, tokens)
    run.finalize()

    written = {}
    for doc_id, rows in run.score_all().items():
        try:
            written[doc_id] = store.write(doc_id, rows)
        except CorpusIOError as e:
            if config.on_error == "abort":
                raise
            logger.warning("Skipping scores of document %s: %s", doc_id, e)
            continue
        if config.top_k:
            keywords = run.keywords(doc_id, config.top_k)
            logger.info("Document %s: %s", doc_id, ", ".join(f"{row.term}={row.score:.4f}" for row in keywords))

    logger.info(
        "Wrote %d score tables (%d documents, %d terms)", len(written), run.corpus_size, len(run.document_frequency)
    )
    return written


def run(config: RunConfig, hf_options: dict | None = None) -> dict[DocumentID, Path]:
    store = DocumentStore(config.input_dir, config.output_dir, config.input_pattern, config.output_pattern)
    if hf_options:
        logger.info("Loading %s (%s) from the Hugging Face hub", hf_options["name"], hf_options["split"])
        documents = load_documents(**hf_options)
    else:
        documents = read_corpus(config, store)
    return score_corpus(documents, store, config)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(levelname)s:%(name)s - %(message)s",
    )

    try:
        config = RunConfig.from_args(args)
    except ValueError as e:
        parser.error(str(e))

    hf_options = None
    if args.hf_dataset:
        hf_options = {
            "name": args.hf_dataset,
            "split": args.hf_split,
            "config_name": args.hf_config,
            "text_field": args.text_field,
            "id_field": args.id_field,
        }

    try:
        run(config, hf_options)
    except TFIDFError as e:
        logger.error("Run aborted: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
