from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from app.schemas.message import MessageResponse

class ConversationCreate(BaseModel):
    product_id: str
    receiver_id: str

class ConversationResponse(BaseModel):
    id: str
    participant_ids: List[str]
    product_id: str
    conversation_key: str
    last_message_id: Optional[str] = None
    last_message_at: Optional[datetime] = None
    is_active: bool
    created_at: datetime
    
    class Config:
        from_attributes = True

class ConversationSummary(ConversationResponse):
    last_message: Optional[MessageResponse] = None
    unread_count: int = 0

class ConversationCreateResponse(BaseModel):
    conversation: ConversationResponse
    created: bool
