from fastapi import APIRouter, Depends, HTTPException
from app.modules.intents.schemas import (
    ActionKind, PendingIntent, PendingIntentWrite, PendingIntentListResponse, ClearIntentResponse
)
from app.modules.intents.service import IntentStore
from app.core.dependencies import get_intent_store
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/intents", tags=["intents"])


@router.get("", response_model=PendingIntentListResponse)
async def list_pending_intents(store: IntentStore = Depends(get_intent_store)):
    """Pending intents for this client, one per action kind at most"""
    return PendingIntentListResponse(client_id=store.client_id, intents=store.pending_intents())


@router.get("/{kind}", response_model=PendingIntent)
async def get_pending_intent(kind: ActionKind, store: IntentStore = Depends(get_intent_store)):
    intent = store.get_pending_intent(kind)
    if intent is None:
        raise HTTPException(status_code=404, detail=f"No pending {kind.value} intent")
    return intent


@router.put("/{kind}", response_model=PendingIntent)
async def set_pending_intent(
    kind: ActionKind,
    intent_data: PendingIntentWrite,
    store: IntentStore = Depends(get_intent_store)
):
    """Overwrite the pending intent for kind"""
    intent = PendingIntent(kind=kind, target_id=intent_data.target_id, return_path=intent_data.return_path)
    if not store.set_pending_intent(kind, intent):
        logger.info(f"Pending {kind.value} intent for client {store.client_id} was not persisted")
    return intent


@router.delete("/{kind}", response_model=ClearIntentResponse)
async def clear_pending_intent(kind: ActionKind, store: IntentStore = Depends(get_intent_store)):
    """Idempotent: clearing an empty slot reports cleared=False"""
    cleared = store.clear_pending_intent(kind)
    return ClearIntentResponse(kind=kind, cleared=cleared, remaining=store.get_pending_intent(kind))
