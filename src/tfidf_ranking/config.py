"""
Run configuration.

Defaults come from environment variables and can be overridden on the
command line:
    TFIDF_INPUT_DIR=corpus/            # Directory holding the documents
    TFIDF_OUTPUT_DIR=scores/           # Directory receiving the score tables
    TFIDF_INPUT_PATTERN=doc{}.txt      # Input filename, "{}" is the document ID
    TFIDF_OUTPUT_PATTERN=doc{}.csv     # Output filename, "{}" is the document ID
    TFIDF_NUM_DOCS=5                   # Corpus is documents 1..N unless listed explicitly
    TFIDF_ON_ERROR=abort               # abort or skip on unreadable documents
    TFIDF_LOG_LEVEL=INFO
"""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass, field

from tfidf_ranking.corpus_io import parse_doc_id

DEFAULT_INPUT_DIR = os.environ.get("TFIDF_INPUT_DIR", ".")
DEFAULT_OUTPUT_DIR = os.environ.get("TFIDF_OUTPUT_DIR", ".")
DEFAULT_INPUT_PATTERN = os.environ.get("TFIDF_INPUT_PATTERN", "doc{}.txt")
DEFAULT_OUTPUT_PATTERN = os.environ.get("TFIDF_OUTPUT_PATTERN", "doc{}.csv")
DEFAULT_NUM_DOCS = int(os.environ.get("TFIDF_NUM_DOCS", "5"))
DEFAULT_ON_ERROR = os.environ.get("TFIDF_ON_ERROR", "abort")
DEFAULT_LOG_LEVEL = os.environ.get("TFIDF_LOG_LEVEL", "INFO")

ON_ERROR_CHOICES = ("abort", "skip")


@dataclass
class RunConfig:
    input_dir: str = DEFAULT_INPUT_DIR
    output_dir: str = DEFAULT_OUTPUT_DIR
    input_pattern: str = DEFAULT_INPUT_PATTERN
    output_pattern: str = DEFAULT_OUTPUT_PATTERN
    doc_ids: list[int | str] = field(default_factory=list)
    num_docs: int = DEFAULT_NUM_DOCS
    discover: bool = False
    top_k: int | None = None
    on_error: str = DEFAULT_ON_ERROR
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self):
        if self.on_error not in ON_ERROR_CHOICES:
            raise ValueError(f"on_error must be one of {ON_ERROR_CHOICES}, got {self.on_error!r}")
        if self.num_docs < 1:
            raise ValueError(f"num_docs must be positive, got {self.num_docs}")
        if len(set(self.doc_ids)) != len(self.doc_ids):
            raise ValueError(f"Document IDs must be unique, got {self.doc_ids}")

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> RunConfig:
        return cls(
            input_dir=args.input_dir,
            output_dir=args.output_dir,
            input_pattern=args.input_pattern,
            output_pattern=args.output_pattern,
            doc_ids=[parse_doc_id(d) for d in (args.docs or [])],
            num_docs=args.num_docs,
            discover=args.discover,
            top_k=args.top_k,
            on_error=args.on_error,
            log_level=args.log_level,
        )
