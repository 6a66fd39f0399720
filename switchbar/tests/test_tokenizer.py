"""Tests for tokenization, transliteration and term expansion."""

from switchbar.core.terms import expand_term
from switchbar.core.tokenizer import tokenize
from switchbar.core.transliterate import contains_cjk, to_pinyin


class TestTokenize:
    """Test the script-aware tokenizer."""

    def test_empty_and_non_string(self):
        assert tokenize("") == []
        assert tokenize(None) == []
        assert tokenize(42) == []

    def test_lowercases_and_splits_punctuation(self):
        assert tokenize("Hello, World!") == ["hello", "world"]
        assert tokenize("foo-bar_baz.qux") == ["foo", "bar", "baz", "qux"]
        assert tokenize("(a) [b] {c} 'd' \"e\"") == ["a", "b", "c", "d", "e"]

    def test_splits_urls_on_slashes_and_colons(self):
        assert tokenize("https://mail.google.com/inbox") == ["https", "mail", "google", "com", "inbox"]
        assert tokenize("C:\\Users\\me") == ["c", "users", "me"]

    def test_keeps_unlisted_symbols(self):
        """Only the fixed punctuation class separates tokens."""
        assert tokenize("?q=rust&page=2") == ["q=rust&page=2"]

    def test_splits_script_boundaries(self):
        assert tokenize("日本2024") == ["日本", "2024"]
        assert tokenize("abc中文def") == ["abc", "中文", "def"]

    def test_query_tokens_keep_numbers(self):
        assert tokenize("Page 2") == ["page", "2"]

    def test_title_drops_numeric_tokens(self):
        assert tokenize("Page 2 of 10", "title") == ["page", "of"]

    def test_title_adds_pinyin_for_chinese(self):
        tokens = tokenize("你好世界", "title")
        assert tokens == ["你好世界", "nihaoshijie"]

    def test_title_pinyin_union_is_deduplicated(self):
        tokens = tokenize("日本2024 riben", "title")
        assert tokens.count("riben") == 1
        assert "日本" in tokens
        assert "2024" not in tokens

    def test_non_title_fields_have_no_pinyin(self):
        assert tokenize("你好世界", "url_base") == ["你好世界"]
        assert tokenize("你好世界") == ["你好世界"]


class TestTransliteration:
    """Test CJK detection and pinyin conversion."""

    def test_contains_cjk(self):
        assert contains_cjk("你好")
        assert contains_cjk("カタカナ")
        assert contains_cjk("mixed 文字")
        assert not contains_cjk("plain ascii")
        assert not contains_cjk("")
        assert not contains_cjk(None)

    def test_to_pinyin_joins_runs(self):
        assert to_pinyin("你好世界") == "nihaoshijie"
        assert to_pinyin("你好") == "nihao"

    def test_to_pinyin_keeps_other_text(self):
        assert to_pinyin("日本2024") == "riben 2024"
        assert to_pinyin("GitHub 中文") == "GitHub zhongwen"

    def test_to_pinyin_empty(self):
        assert to_pinyin("") == ""
        assert to_pinyin(None) == ""


class TestExpandTerm:
    """Test n-gram expansion."""

    def test_empty(self):
        assert expand_term("") == []

    def test_short_term_is_kept_alone(self):
        assert expand_term("ab") == ["ab"]

    def test_term_first_then_ngrams(self):
        expansions = expand_term("google")
        assert expansions[0] == "google"
        assert expansions[1:5] == ["goo", "oog", "ogl", "gle"]
        assert "goog" in expansions
        assert "oogle" in expansions

    def test_internal_substring(self):
        assert "thu" in expand_term("github")

    def test_ngram_length_bounds(self):
        term = "abcdefghijklmnop"
        ngrams = expand_term(term)[1:]
        assert min(len(g) for g in ngrams) == 3
        assert max(len(g) for g in ngrams) == 10
        assert term not in ngrams
