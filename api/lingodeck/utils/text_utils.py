"""
Text utility functions.

Tokenization keeps every character of the input: concatenating the token
texts in order reproduces the original string, and each token carries its
character offset so the UI can map a click back to the source text.
"""
import re
from typing import List, Optional

from lingodeck.schemas.text import Token, TokenType

# Punctuation split out of words (Latin and Arabic variants)
PUNCTUATION_CHARS = ".!?,;:؟،"
SENTENCE_TERMINATORS = ".!?؟"

_WHITESPACE_SPLIT = re.compile(r"(\s+)")
_PUNCTUATION = re.compile(f"[{re.escape(PUNCTUATION_CHARS)}]")
_SENTENCE = re.compile(f"[^{re.escape(SENTENCE_TERMINATORS)}]*[{re.escape(SENTENCE_TERMINATORS)}]+|[^{re.escape(SENTENCE_TERMINATORS)}]+$")


def tokenize_words(text: Optional[str], language: Optional[str] = None) -> List[Token]:
    """
    Tokenize text into words, punctuation, and whitespace.

    Whitespace runs become a single token. Punctuation is split out of
    adjacent word text even without surrounding whitespace.

    Args:
        text: Text to tokenize (None or empty yields no tokens)
        language: Language of the text. Currently all languages share one
            rule set; the argument is accepted so callers do not change when
            language-specific rules are added.

    Returns:
        Tokens in input order with their character offsets
    """
    if not text:
        return []

    tokens: List[Token] = []
    offset = 0

    for segment in _WHITESPACE_SPLIT.split(text):
        if not segment:
            continue

        if segment.isspace():
            tokens.append(Token(text=segment, type=TokenType.WHITESPACE, index=offset))
            offset += len(segment)
            continue

        position = 0
        for match in _PUNCTUATION.finditer(segment):
            if match.start() > position:
                tokens.append(Token(
                    text=segment[position:match.start()],
                    type=TokenType.WORD,
                    index=offset + position,
                ))
            tokens.append(Token(text=match.group(), type=TokenType.PUNCTUATION, index=offset + match.start()))
            position = match.end()

        if position < len(segment):
            tokens.append(Token(text=segment[position:], type=TokenType.WORD, index=offset + position))

        offset += len(segment)

    return tokens


def get_word_tokens(tokens: List[Token]) -> List[Token]:
    """Extract only word tokens from tokenized text."""
    return [token for token in tokens if token.type == TokenType.WORD]


def reconstruct_text(tokens: List[Token]) -> str:
    """Rebuild the original text from tokens."""
    return "".join(token.text for token in tokens)


def count_words(text: Optional[str], language: Optional[str] = None) -> int:
    """Number of word tokens in text."""
    return len(get_word_tokens(tokenize_words(text, language)))


def split_sentences(text: Optional[str]) -> List[str]:
    """
    Split a passage into sentences.

    Terminators stay attached to their sentence; a trailing fragment without
    a terminator is kept as its own sentence.

    Args:
        text: Passage text

    Returns:
        Stripped, non-empty sentences in order
    """
    if not text:
        return []
    sentences = [match.group().strip() for match in _SENTENCE.finditer(text)]
    return [sentence for sentence in sentences if sentence]


def normalize_answer(text: Optional[str]) -> str:
    """
    Normalize a free-text answer for exact comparison.

    Args:
        text: The answer as typed

    Returns:
        Answer with surrounding whitespace trimmed, inner whitespace collapsed
        and case folded
    """
    if not text:
        return ""
    return " ".join(text.split()).casefold()
