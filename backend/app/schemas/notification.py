from pydantic import BaseModel, Field, validator
from typing import Any, Dict, List, Literal, Optional, Type
from datetime import datetime

NotificationType = Literal[
    "message",
    "favorite",
    "view",
    "system",
    "product_sold",
    "product_updated",
]

# Payloads tipados por tipo de notificación

class MessageNotificationData(BaseModel):
    conversation_id: str
    product_id: str

class FavoriteNotificationData(BaseModel):
    product_id: str

class ProductNotificationData(BaseModel):
    product_id: str
    status: Optional[str] = None

class SystemNotificationData(BaseModel):
    reason: Optional[str] = None
    details: Optional[str] = None

NOTIFICATION_PAYLOADS: Dict[str, Type[BaseModel]] = {
    "message": MessageNotificationData,
    "favorite": FavoriteNotificationData,
    "view": ProductNotificationData,
    "product_sold": ProductNotificationData,
    "product_updated": ProductNotificationData,
    "system": SystemNotificationData,
}

class NotificationEvent(BaseModel):
    """
    Evento de dominio que puede generar una notificación.

    `actor_user_id` es quien realizó la acción; si coincide con
    `target_user_id` no se notifica.
    """
    target_user_id: str
    actor_user_id: Optional[str] = None
    type: NotificationType
    title: str
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)
    related_product_id: Optional[str] = None
    related_conversation_id: Optional[str] = None
    related_user_id: Optional[str] = None

    def validated_data(self) -> Dict[str, Any]:
        payload_model = NOTIFICATION_PAYLOADS[self.type]
        return payload_model(**self.data).model_dump(exclude_none=True)

class NotificationResponse(BaseModel):
    id: str
    type: str
    title: str
    message: str
    is_read: bool
    data: Dict[str, Any] = {}
    related_product_id: Optional[str] = None
    related_conversation_id: Optional[str] = None
    related_user_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

class NotificationList(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int

class NotificationUpdate(BaseModel):
    is_read: bool = True

class SystemNotificationCreate(BaseModel):
    user_id: str
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=1000)
    reason: Optional[str] = None

    @validator('title', 'message')
    def strip_text(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('El texto no puede estar vacío')
        return v
