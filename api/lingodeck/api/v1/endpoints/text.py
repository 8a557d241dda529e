from fastapi import APIRouter
from typing import Optional

from lingodeck.schemas.practice import HebrewCognate
from lingodeck.schemas.text import HebrewCognateRequest, TokenizeRequest, TokenizeResponse
from lingodeck.services.hebrew_cognate_service import find_hebrew_cognate, should_show_hebrew_cognate
from lingodeck.utils.text_utils import get_word_tokens, split_sentences, tokenize_words

router = APIRouter(prefix="/text", tags=["text"])


@router.post("/tokenize", response_model=TokenizeResponse)
async def tokenize(request: TokenizeRequest):
    """
    Tokenize text into words, punctuation and whitespace.

    Concatenating the token texts reproduces the input exactly.
    """
    tokens = tokenize_words(request.text, request.language.value)
    return TokenizeResponse(
        tokens=tokens,
        word_tokens=get_word_tokens(tokens),
        sentences=split_sentences(request.text),
    )


@router.post("/hebrew-cognate", response_model=Optional[HebrewCognate])
async def hebrew_cognate(request: HebrewCognateRequest):
    """Hebrew cognate for a selection, or null when it should not be shown."""
    candidate = find_hebrew_cognate(request.text)
    if should_show_hebrew_cognate(
        request.language.value,
        request.content_type.value,
        candidate,
        selected_text=request.text,
    ):
        return candidate
    return None
