"""Segmenters that split document text into terms.

The engine treats segmentation as a pluggable capability: any object with a
``segment(text) -> list[str]`` method can be used. Three implementations
are provided:

- ``RegexSegmenter`` -- Unicode word tokens, lowercased. No external
  dependencies; the default.
- ``JiebaSegmenter`` -- Chinese search-mode segmentation using the
  ``jieba`` library (installed with the ``cjk`` extra).
- ``DelimiterSegmenter`` -- splits on a fixed delimiter such as ``/``, for
  documents that arrive pre-tokenized.

The language-aware segmenters drop tokens shorter than two characters
after trimming (single characters and whitespace carry no signal).
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import Optional

#: Tokens whose trimmed length is below this are discarded.
MIN_TERM_LENGTH = 2

# Letters and digits in any script, allowing inner apostrophes and hyphens
_WORD_RE = re.compile(r"[^\W_]+(?:['-][^\W_]+)*")


def filter_terms(tokens: Iterable[str], min_length: int = MIN_TERM_LENGTH) -> list[str]:
    """Drop tokens whose trimmed length is below ``min_length``.

    Order and duplicates are preserved.
    """
    return [t for t in tokens if len(t.strip()) >= min_length]


class Segmenter(ABC):
    """Abstract base class for segmenters.

    Implementations return the document's terms in order, duplicates
    included. De-duplication is the caller's concern.
    """

    @abstractmethod
    def segment(self, text: str) -> list[str]:
        """Split ``text`` into an ordered list of terms."""
        ...


class RegexSegmenter(Segmenter):
    """Unicode word segmenter.

    Args:
        lowercase: Fold tokens to lowercase.
        min_length: Minimum trimmed token length.
    """

    def __init__(self, lowercase: bool = True, min_length: int = MIN_TERM_LENGTH) -> None:
        self.lowercase = lowercase
        self.min_length = min_length

    def segment(self, text: str) -> list[str]:
        tokens = [m.group() for m in _WORD_RE.finditer(text)]
        if self.lowercase:
            tokens = [t.lower() for t in tokens]
        return filter_terms(tokens, self.min_length)

    def __repr__(self) -> str:
        return f"RegexSegmenter(lowercase={self.lowercase}, min_length={self.min_length})"


class JiebaSegmenter(Segmenter):
    """Chinese segmenter using jieba's search mode.

    Search mode emits both whole words and their shorter sub-words, which
    gives the classifier more overlapping evidence per document. The
    dictionary is loaded lazily on first use.

    Args:
        dictionary: Optional path to a replacement main dictionary.
        user_dictionary: Optional path to a user dictionary to load on top.
        hmm: Use the HMM model to discover words missing from the dictionary.
        min_length: Minimum trimmed token length.

    Raises:
        ImportError: If jieba is not installed.
    """

    def __init__(
        self,
        dictionary: Optional[str | Path] = None,
        user_dictionary: Optional[str | Path] = None,
        hmm: bool = True,
        min_length: int = MIN_TERM_LENGTH,
    ) -> None:
        try:
            import jieba
        except ImportError as exc:
            raise ImportError(
                "jieba is required for Chinese segmentation. "
                "Install it with: pip install 'bayesian-classifier[cjk]'"
            ) from exc

        if dictionary is not None:
            self._tokenizer = jieba.Tokenizer(dictionary=str(dictionary))
        else:
            self._tokenizer = jieba.Tokenizer()
        if user_dictionary is not None:
            self._tokenizer.load_userdict(str(user_dictionary))
        self.hmm = hmm
        self.min_length = min_length

    def segment(self, text: str) -> list[str]:
        tokens = self._tokenizer.lcut_for_search(text, HMM=self.hmm)
        return filter_terms(tokens, self.min_length)


class DelimiterSegmenter(Segmenter):
    """Splits text on a fixed delimiter.

    Pieces are trimmed and empty pieces dropped. No minimum length is
    applied: pre-tokenized input is taken as given, so ``"a/b"`` yields
    ``["a", "b"]``.

    Args:
        delimiter: Separator string (default ``/``).

    Raises:
        ValueError: If the delimiter is empty.
    """

    def __init__(self, delimiter: str = "/") -> None:
        if not delimiter:
            raise ValueError("Delimiter must be a non-empty string")
        self.delimiter = delimiter

    def segment(self, text: str) -> list[str]:
        pieces = (piece.strip() for piece in text.split(self.delimiter))
        return [piece for piece in pieces if piece]

    def __repr__(self) -> str:
        return f"DelimiterSegmenter(delimiter={self.delimiter!r})"
