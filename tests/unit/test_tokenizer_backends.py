"""Unit tests for the concrete tokenizer backends."""

import pytest

from bm25_svector.errors import ModelLoadError
from bm25_svector.tokenization import backends
from bm25_svector.tokenization.backends import (
    HuggingFaceTokenizer,
    JiebaTokenizer,
    TiktokenTokenizer,
    TinySegmenterTokenizer,
    WhitespaceTokenizer,
    default_backend_factories,
)
from bm25_svector.tokenization.kinds import TokenizerKind
from bm25_svector.tokenization.registry import TokenizerRegistry


class _FakeEncoding:
    def __init__(self, tokens):
        self.tokens = tokens


class _FakeHubTokenizer:
    """Stand-in for ``tokenizers.Tokenizer`` that never touches the hub."""

    loaded: list = []

    def __init__(self, identifier):
        self.identifier = identifier

    @classmethod
    def from_pretrained(cls, identifier, revision="main", token=None):
        if identifier == "missing/model":
            raise RuntimeError("Model missing/model not found on the hub")
        cls.loaded.append((identifier, revision, token))
        return cls(identifier)

    def encode(self, text, add_special_tokens=True):
        assert add_special_tokens is False
        pieces = []
        for word in text.split():
            pieces.extend([word[:2], f"##{word[2:]}"] if len(word) > 2 else [word])
        return _FakeEncoding(pieces)


@pytest.fixture
def fake_hub(monkeypatch):
    _FakeHubTokenizer.loaded = []
    monkeypatch.setattr(backends, "HFTokenizerModel", _FakeHubTokenizer)
    return _FakeHubTokenizer


@pytest.mark.unit
class TestWhitespaceTokenizer:
    def test_splits_on_whitespace_runs(self):
        assert WhitespaceTokenizer().tokenize("i  have\nan\tapple") == ["i", "have", "an", "apple"]

    def test_information_separators_are_not_whitespace(self):
        assert WhitespaceTokenizer().tokenize("a\x1cb c\x1fd") == ["a\x1cb", "c\x1fd"]

    def test_unicode_white_space(self):
        text = "a\u00a0b\u2003c\u3000d\u0085e\u2029f"

        assert WhitespaceTokenizer().tokenize(text) == ["a", "b", "c", "d", "e", "f"]

    def test_leading_and_trailing_runs_yield_no_empty_tokens(self):
        assert WhitespaceTokenizer().tokenize("  \n") == []
        assert WhitespaceTokenizer().tokenize(" x ") == ["x"]


@pytest.mark.unit
class TestHuggingFaceTokenizer:
    def test_returns_subword_strings_without_special_tokens(self, fake_hub):
        tokenizer = HuggingFaceTokenizer("bert-base-uncased", revision="v1", token="secret")

        assert tokenizer.tokenize("apple pie") == ["ap", "##ple", "pi", "##e"]
        assert fake_hub.loaded == [("bert-base-uncased", "v1", "secret")]

    def test_load_failure_is_wrapped(self, fake_hub):
        with pytest.raises(ModelLoadError) as exc_info:
            HuggingFaceTokenizer("missing/model")

        assert exc_info.value.kind == "hf"
        assert exc_info.value.model == "missing/model"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_registry_passes_hub_settings(self, fake_hub):
        registry = TokenizerRegistry(hf_revision="refs/pr/1", hf_token="tok")

        registry.tokenize("hf", "bert-base-uncased", "hello")
        registry.tokenize("hf", "bert-base-uncased", "again")

        assert fake_hub.loaded == [("bert-base-uncased", "refs/pr/1", "tok")]


@pytest.mark.unit
class TestJiebaTokenizer:
    def test_segments_chinese_text(self):
        assert JiebaTokenizer().tokenize("我来到北京清华大学") == ["我", "来到", "北京", "清华大学"]


@pytest.mark.unit
class TestTinySegmenterTokenizer:
    def test_segments_japanese_text(self):
        tokens = TinySegmenterTokenizer().tokenize("私の名前は中野です")

        assert tokens == ["私", "の", "名前", "は", "中野", "です"]

    def test_empty_text_yields_no_tokens(self):
        assert TinySegmenterTokenizer().tokenize("") == []


@pytest.mark.unit
class TestTiktokenTokenizer:
    def test_unknown_name_fails_to_load(self):
        with pytest.raises(ModelLoadError) as exc_info:
            TiktokenTokenizer("definitely-not-an-encoding")

        assert exc_info.value.kind == "tiktoken"
        assert "unknown encoding or model" in str(exc_info.value)


def _tiktoken_or_skip(name):
    try:
        return TiktokenTokenizer(name)
    except ModelLoadError as exc:
        pytest.skip(f"tiktoken data unavailable: {exc}")


@pytest.mark.network
class TestTiktokenEncodings:
    """These download BPE ranks on first use."""

    def test_cl100k_base_ids_as_decimal_strings(self):
        tokenizer = _tiktoken_or_skip("cl100k_base")

        assert tokenizer.tokenize("i want an apple") == ["72", "1390", "459", "24149"]

    def test_model_name_resolves_to_its_encoding(self):
        by_model = _tiktoken_or_skip("gpt-4")

        assert by_model.tokenize("i want an apple") == ["72", "1390", "459", "24149"]

    def test_special_token_text_is_encoded_as_plain_text(self):
        tokenizer = _tiktoken_or_skip("cl100k_base")

        assert len(tokenizer.tokenize("<|endoftext|>")) > 1


@pytest.mark.unit
class TestDefaultFactories:
    def test_every_kind_has_a_factory(self):
        assert set(default_backend_factories()) == set(TokenizerKind)

    def test_whitespace_factory_builds_whitespace_backend(self):
        backend = default_backend_factories()[TokenizerKind.WHITESPACE](None)

        assert isinstance(backend, WhitespaceTokenizer)
