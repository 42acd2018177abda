from pydantic import BaseModel, Field
from datetime import datetime

class MessageCreate(BaseModel):
    conversation_id: str
    receiver_id: str
    # El recorte y la validación de vacío se hacen en el servicio
    content: str = Field(..., max_length=2000)

class MessageResponse(BaseModel):
    id: str
    conversation_id: str
    sender_id: str
    receiver_id: str
    product_id: str
    content: str
    message_type: str
    is_read: bool
    created_at: datetime
    
    class Config:
        from_attributes = True

class MarkConversationRead(BaseModel):
    conversation_id: str

class UnreadCount(BaseModel):
    unread_count: int

class UpdatedCount(BaseModel):
    updated_count: int
