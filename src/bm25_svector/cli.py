"""Command line entry point: ``bm25-svector tokenize|document|query``."""

# ruff: noqa: T201  # CLI intentionally prints results

from __future__ import annotations

import argparse
from collections.abc import Sequence
import sys

import orjson

from bm25_svector.config import Settings, get_settings
from bm25_svector.errors import SvectorError
from bm25_svector.observability.logging import configure_logging
from bm25_svector.service import synthesize_document_sparse_vector, synthesize_query_sparse_vector, tokenize


EXIT_USAGE_ERROR = 2


def _add_tokenizer_args(parser: argparse.ArgumentParser, settings: Settings) -> None:
    parser.add_argument(
        "--tokenizer",
        default=settings.default_tokenizer,
        help="Tokenizer kind: whitespace, hf, jieba, tinysegmenter, tiktoken (default: %(default)s)",
    )
    parser.add_argument("--model", default=None, help="Model id (hf) or encoding/model name (tiktoken)")


def _add_vector_args(parser: argparse.ArgumentParser, settings: Settings) -> None:
    parser.add_argument("--terms", required=True, help="Path to the SQLite term statistics database")
    parser.add_argument("--dims", type=int, required=True, help="Declared vector dimensionality")
    parser.add_argument(
        "--style",
        default=settings.default_style,
        help="Output dialect: pgvecto.rs or pgvector (default: %(default)s)",
    )
    _add_tokenizer_args(parser, settings)


def build_parser(settings: Settings | None = None) -> argparse.ArgumentParser:
    settings = settings or get_settings()
    parser = argparse.ArgumentParser(
        prog="bm25-svector",
        description="Tokenize text and synthesize BM25 sparse vectors",
    )
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level (default: %(default)s)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    tokenize_parser = subparsers.add_parser("tokenize", help="Print the tokens of TEXT as a JSON array")
    tokenize_parser.add_argument("text")
    _add_tokenizer_args(tokenize_parser, settings)

    document_parser = subparsers.add_parser("document", help="Print the BM25 document vector of TEXT")
    document_parser.add_argument("text")
    document_parser.add_argument("--words", type=int, required=True, help="Total words in the corpus")
    document_parser.add_argument("--docs", type=int, required=True, help="Total documents in the corpus")
    document_parser.add_argument("--b", type=float, default=settings.default_b, help="BM25 b (default: %(default)s)")
    document_parser.add_argument(
        "--k1", type=float, default=settings.default_k1, help="BM25 k1 (default: %(default)s)"
    )
    _add_vector_args(document_parser, settings)

    query_parser = subparsers.add_parser("query", help="Print the BM25 query vector of TEXT")
    query_parser.add_argument("text")
    _add_vector_args(query_parser, settings)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    settings = get_settings()
    args = build_parser(settings).parse_args(argv)
    # stdout carries the command result
    configure_logging(args.log_level, json_output=settings.log_json, stream=sys.stderr)

    try:
        if args.command == "tokenize":
            tokens = tokenize(args.text, args.tokenizer, args.model)
            print(orjson.dumps(tokens).decode("utf-8"))
        elif args.command == "document":
            print(
                synthesize_document_sparse_vector(
                    args.terms,
                    args.b,
                    args.k1,
                    args.words,
                    args.docs,
                    args.dims,
                    args.text,
                    args.style,
                    args.tokenizer,
                    args.model,
                )
            )
        else:
            print(
                synthesize_query_sparse_vector(
                    args.terms,
                    args.dims,
                    args.text,
                    args.style,
                    args.tokenizer,
                    args.model,
                )
            )
    except SvectorError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_USAGE_ERROR
    return 0


if __name__ == "__main__":
    sys.exit(main())
