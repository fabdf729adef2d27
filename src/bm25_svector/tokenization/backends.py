"""Concrete tokenizer backends.

Each backend is expensive to build (dictionaries, BPE ranks or hub downloads
are loaded in ``__init__``) and cheap, side-effect-free to call afterwards.
Instances are only ever created by the registry, which owns and shares them.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
import logging
import re
from typing import Protocol

import jieba
import tiktoken
import tinysegmenter
from tokenizers import Tokenizer as HFTokenizerModel

from bm25_svector.errors import ModelLoadError
from bm25_svector.tokenization.kinds import TokenizerKind


logger = logging.getLogger(__name__)

# Unicode White_Space. str.split() would also break on U+001C..U+001F.
_WHITESPACE_RE = re.compile("[\t\n\x0b\x0c\r \x85\xa0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000]+")


class TokenizerBackend(Protocol):
    """Protocol implemented by tokenizer backends."""

    def tokenize(self, text: str) -> list[str]:  # pragma: no cover - interface definition
        ...


BackendFactory = Callable[[str | None], TokenizerBackend]


class WhitespaceTokenizer:
    """Splits on runs of Unicode White_Space characters."""

    def tokenize(self, text: str) -> list[str]:
        return [piece for piece in _WHITESPACE_RE.split(text) if piece]


class HuggingFaceTokenizer:
    """Subword tokenizer loaded from the HuggingFace hub."""

    def __init__(self, model: str, *, revision: str = "main", token: str | None = None) -> None:
        self.model = model
        try:
            self._tokenizer = HFTokenizerModel.from_pretrained(model, revision=revision, token=token)
        except Exception as exc:  # hub, IO and parse failures share no common base
            raise ModelLoadError(TokenizerKind.HUGGINGFACE.value, model, str(exc)) from exc

    def tokenize(self, text: str) -> list[str]:
        return list(self._tokenizer.encode(text, add_special_tokens=False).tokens)


class JiebaTokenizer:
    """Chinese word segmentation (accurate mode, HMM enabled for unknown words)."""

    def __init__(self) -> None:
        self._jieba = jieba.Tokenizer()
        self._jieba.initialize()

    def tokenize(self, text: str) -> list[str]:
        return list(self._jieba.cut(text, cut_all=False, HMM=True))


class TinySegmenterTokenizer:
    """Japanese segmentation using the compact TinySegmenter model."""

    def __init__(self) -> None:
        self._segmenter = tinysegmenter.TinySegmenter()

    def tokenize(self, text: str) -> list[str]:
        if not text:
            return []
        return list(self._segmenter.tokenize(text))


class TiktokenTokenizer:
    """BPE token ids from a tiktoken encoding, rendered as decimal strings.

    ``name`` is either an encoding (``cl100k_base``) or a model name that
    tiktoken maps to one (``gpt-4``).
    """

    def __init__(self, name: str) -> None:
        self.name = name
        try:
            if name in tiktoken.list_encoding_names():
                self._encoding = tiktoken.get_encoding(name)
            else:
                self._encoding = tiktoken.encoding_for_model(name)
        except KeyError:
            raise ModelLoadError(TokenizerKind.TIKTOKEN.value, name, "unknown encoding or model") from None
        except Exception as exc:  # BPE rank download or parse failure
            raise ModelLoadError(TokenizerKind.TIKTOKEN.value, name, str(exc)) from exc
        logger.debug("Resolved tiktoken '%s' to encoding '%s'", name, self._encoding.name)

    def tokenize(self, text: str) -> list[str]:
        return [str(token_id) for token_id in self._encoding.encode_ordinary(text)]


def default_backend_factories(
    *, hf_revision: str = "main", hf_token: str | None = None
) -> Mapping[TokenizerKind, BackendFactory]:
    """Return the production factory table, one entry per kind."""

    def _huggingface(model: str | None) -> TokenizerBackend:
        return HuggingFaceTokenizer(model or "", revision=hf_revision, token=hf_token)

    def _tiktoken(model: str | None) -> TokenizerBackend:
        return TiktokenTokenizer(model or "")

    return {
        TokenizerKind.WHITESPACE: lambda _model: WhitespaceTokenizer(),
        TokenizerKind.HUGGINGFACE: _huggingface,
        TokenizerKind.JIEBA: lambda _model: JiebaTokenizer(),
        TokenizerKind.TINYSEGMENTER: lambda _model: TinySegmenterTokenizer(),
        TokenizerKind.TIKTOKEN: _tiktoken,
    }
