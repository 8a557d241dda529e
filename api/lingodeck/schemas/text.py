"""
Text tokenization schemas.
"""
from enum import Enum
from pydantic import BaseModel, Field
from typing import List, Optional

from lingodeck.models.enums import ContentType, PracticeLanguage


class TokenType(str, Enum):
    """Kind of token produced by the tokenizer."""
    WORD = "word"
    PUNCTUATION = "punctuation"
    WHITESPACE = "whitespace"


class Token(BaseModel):
    """A slice of the input text."""
    text: str
    type: TokenType
    index: int = Field(..., description="Character offset in the original string")


class TokenizeRequest(BaseModel):
    """Request to tokenize a piece of text."""
    text: Optional[str] = Field(None, description="Text to tokenize")
    language: PracticeLanguage = Field(PracticeLanguage.ARABIC, description="Language of the text")


class TokenizeResponse(BaseModel):
    """Tokenized text."""
    tokens: List[Token]
    word_tokens: List[Token]
    sentences: List[str]


class HebrewCognateRequest(BaseModel):
    """Request for a gated Hebrew cognate lookup."""
    text: str = Field(..., description="Selected text")
    language: PracticeLanguage = Field(..., description="Language of the selection")
    content_type: ContentType = Field(ContentType.WORD, description="Content type of the selection")

    class Config:
        json_schema_extra = {
            "example": {
                "text": "كتاب",
                "language": "arabic",
                "content_type": "word"
            }
        }
