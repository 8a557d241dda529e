"""
API v1 router aggregation.
"""
from fastapi import APIRouter
from lingodeck.api.v1.endpoints import (
    text, practice_items, card_stacks, exercises
)

api_router = APIRouter()

# Include all endpoint routers
# Note: Each router already defines its own prefix, so we don't add another one here
api_router.include_router(text.router)
api_router.include_router(practice_items.router)
api_router.include_router(card_stacks.router)
api_router.include_router(exercises.router)
