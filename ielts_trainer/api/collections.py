"""
Favorites and Wrong-Book endpoints
"""
import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from ielts_trainer.api.deps import get_session_client
from ielts_trainer.client import Collection, SessionClient
from ielts_trainer.exceptions import CollectionRemovalError, StoreError
from ielts_trainer.schemas.collection import CollectionResponse, RemovalResponse
from ielts_trainer.services.collection_service import CollectionView

router = APIRouter(tags=["collections"])
logger = logging.getLogger(__name__)


def _list(client: SessionClient, collection: Collection, expanded: Optional[UUID]) -> CollectionResponse:
    view = CollectionView(client, collection)
    try:
        view.load()
    except StoreError as e:
        logger.error(f"Error fetching {collection.value}: {str(e)}")
        raise HTTPException(status_code=503, detail="Could not load this list, please try again later.")

    if expanded is not None:
        view.toggle_expand(expanded)
    return view.render()


def _remove(client: SessionClient, collection: Collection, question_id: UUID) -> RemovalResponse:
    view = CollectionView(client, collection)
    try:
        removed = view.remove(question_id)
    except CollectionRemovalError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return RemovalResponse(collection=collection.value, question_id=question_id, removed=removed)


@router.get("/favorites", response_model=CollectionResponse)
async def list_favorites(
    expanded: Optional[UUID] = None,
    client: SessionClient = Depends(get_session_client)
):
    """Favorited questions, newest first; `expanded` opens one item's detail"""
    return _list(client, Collection.FAVORITES, expanded)


@router.delete("/favorites/{question_id}", response_model=RemovalResponse)
async def remove_favorite(
    question_id: UUID,
    client: SessionClient = Depends(get_session_client)
):
    return _remove(client, Collection.FAVORITES, question_id)


@router.get("/wrong-book", response_model=CollectionResponse)
async def list_wrong_book(
    expanded: Optional[UUID] = None,
    client: SessionClient = Depends(get_session_client)
):
    """Questions answered wrongly, newest first"""
    return _list(client, Collection.WRONG_BOOK, expanded)


@router.delete("/wrong-book/{question_id}", response_model=RemovalResponse)
async def remove_wrong_book_entry(
    question_id: UUID,
    client: SessionClient = Depends(get_session_client)
):
    """Mark a question as mastered"""
    return _remove(client, Collection.WRONG_BOOK, question_id)
