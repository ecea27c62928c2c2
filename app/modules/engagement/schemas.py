from pydantic import BaseModel, Field
from typing import Optional, Dict, Any


class TrackRequest(BaseModel):
    action_type: str = Field(..., min_length=1)
    additional_data: Dict[str, Any] = Field(default_factory=dict)
    feature_name: Optional[str] = None
    element_id: Optional[str] = None  # UI element that fired the event, used for the cooldown


class TrackResponse(BaseModel):
    accepted: bool
    throttled: bool = False
    session_id: Optional[str] = None
