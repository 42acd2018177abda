# El entorno de pruebas se prepara en conftest.py antes de importar la app
import unittest
from typing import Any, Dict, Optional

from fastapi.testclient import TestClient

from app.db import session as db_session
from app.db.base import Base
from app.main import app
from app.models.user import User

API = "/api/v1"
PASSWORD = "Password123!"


class APITestCase(unittest.TestCase):
    """Base para las pruebas: base de datos limpia y cliente HTTP en proceso."""

    def setUp(self):
        self.assertTrue(db_session.init_db_connection(max_retries=1))
        Base.metadata.drop_all(bind=db_session.engine)
        Base.metadata.create_all(bind=db_session.engine)
        self.client = TestClient(app)
        self._counter = 0

    def new_session(self):
        return db_session.SessionLocal()

    def register_user(self, name: str, role: str = "user") -> Dict[str, Any]:
        """Registra e inicia sesión; devuelve id, token y cabeceras."""
        self._counter += 1
        email = f"{name.lower().replace(' ', '.')}{self._counter}@correo.com"
        response = self.client.post(
            f"{API}/users/register",
            json={"email": email, "password": PASSWORD, "full_name": name},
        )
        self.assertEqual(201, response.status_code, response.text)
        user_id = response.json()["id"]

        if role != "user":
            with self.new_session() as db:
                db.query(User).filter(User.id == user_id).update({User.role: role})
                db.commit()

        response = self.client.post(
            f"{API}/users/login",
            data={"username": email, "password": PASSWORD},
        )
        self.assertEqual(200, response.status_code, response.text)
        token = response.json()["access_token"]
        return {
            "id": user_id,
            "email": email,
            "name": name,
            "token": token,
            "headers": {"Authorization": f"Bearer {token}"},
        }

    def create_product(self, seller: Dict[str, Any], title: str = "Bicicleta de montaña", price: float = 150.0) -> Dict[str, Any]:
        response = self.client.post(
            f"{API}/products/",
            json={"title": title, "description": "Poco uso", "price": price, "images": ["https://img.test/1.jpg"]},
            headers=seller["headers"],
        )
        self.assertEqual(201, response.status_code, response.text)
        return response.json()

    def start_conversation(self, user: Dict[str, Any], other: Dict[str, Any], product_id: str) -> Dict[str, Any]:
        response = self.client.post(
            f"{API}/conversations/",
            json={"product_id": product_id, "receiver_id": other["id"]},
            headers=user["headers"],
        )
        self.assertEqual(200, response.status_code, response.text)
        return response.json()

    def send_message(self, sender: Dict[str, Any], conversation_id: str, receiver_id: str, content: str):
        return self.client.post(
            f"{API}/messages/",
            json={"conversation_id": conversation_id, "receiver_id": receiver_id, "content": content},
            headers=sender["headers"],
        )

    def inbox(self, user: Dict[str, Any], limit: Optional[int] = None) -> Dict[str, Any]:
        params = {"limit": limit} if limit is not None else None
        response = self.client.get(f"{API}/notifications/", headers=user["headers"], params=params)
        self.assertEqual(200, response.status_code, response.text)
        return response.json()
