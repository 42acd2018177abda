import time
import unittest
from typing import Any, Dict, Optional

from helpers import API, PASSWORD

from fastapi.testclient import TestClient

from app.db import session as db_session
from app.db.base import Base
from app.main import app


class MarketplaceAPITest(unittest.TestCase):
    """Recorrido completo de la API: favorito, conversación, mensajes y bandeja"""

    auth_token = None
    user_id = None
    product_id = None
    conversation_id = None
    notification_id = None

    # Para pruebas que requieren dos usuarios
    second_user = {
        "email": None,
        "token": None,
        "user_id": None,
    }

    @classmethod
    def setUpClass(cls):
        db_session.init_db_connection(max_retries=1)
        Base.metadata.drop_all(bind=db_session.engine)
        Base.metadata.create_all(bind=db_session.engine)
        cls.client = TestClient(app)

    def make_request(self, method: str, endpoint: str, data: Optional[Dict[str, Any]] = None, token: Optional[str] = None, params: Optional[Dict[str, Any]] = None):
        """Realiza una solicitud a la API con el token indicado o el principal."""
        headers = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        elif self.__class__.auth_token:
            headers["Authorization"] = f"Bearer {self.__class__.auth_token}"

        if data is not None:
            return self.client.request(method, f"{API}{endpoint}", json=data, headers=headers, params=params)
        return self.client.request(method, f"{API}{endpoint}", headers=headers, params=params)

    def _register_and_login(self, email: str, full_name: str) -> Dict[str, Any]:
        response = self.make_request("POST", "/users/register", {
            "email": email,
            "password": PASSWORD,
            "full_name": full_name,
        })
        self.assertEqual(201, response.status_code, response.text)

        response = self.client.post(f"{API}/users/login", data={"username": email, "password": PASSWORD})
        self.assertEqual(200, response.status_code, response.text)
        return response.json()

    def test_01_register_users(self):
        """Registro e inicio de sesión de vendedor y comprador"""
        print("\n----- Test: Registro de Usuarios -----")

        timestamp = int(time.time())
        seller = self._register_and_login(f"vendedor{timestamp}@example.com", "Vendedor de Prueba")
        self.__class__.auth_token = seller["access_token"]
        self.__class__.user_id = seller["user_id"]

        buyer = self._register_and_login(f"comprador{timestamp}@example.com", "Comprador de Prueba")
        self.__class__.second_user["email"] = f"comprador{timestamp}@example.com"
        self.__class__.second_user["token"] = buyer["access_token"]
        self.__class__.second_user["user_id"] = buyer["user_id"]

        print(f"Vendedor: {self.__class__.user_id}, Comprador: {self.__class__.second_user['user_id']}")
        self.assertNotEqual(self.__class__.user_id, self.__class__.second_user["user_id"])

    def test_02_create_product(self):
        """El vendedor publica un anuncio"""
        print("\n----- Test: Crear Producto -----")
        self.assertTrue(self.__class__.auth_token, "Token no disponible")

        response = self.make_request("POST", "/products/", {
            "title": f"Producto de Prueba {int(time.time())}",
            "description": "Descripción del producto de prueba",
            "price": 99.99,
            "currency": "USD",
            "images": ["https://example.com/image1.jpg", "https://example.com/image2.jpg"],
        })

        print(f"Status Code: {response.status_code}")
        print(f"Response: {response.text[:200]}...")

        self.assertEqual(201, response.status_code)
        self.__class__.product_id = response.json()["id"]

    def test_03_buyer_adds_favorite(self):
        """El comprador añade el producto a favoritos"""
        print("\n----- Test: Añadir a Favoritos -----")
        self.assertTrue(self.__class__.product_id, "Producto no disponible")

        token = self.__class__.second_user["token"]
        response = self.make_request("POST", "/favorites/", {"product_id": self.__class__.product_id}, token=token)
        self.assertEqual(200, response.status_code)
        self.assertTrue(response.json()["created"])

        response = self.make_request("POST", "/favorites/", {"product_id": self.__class__.product_id}, token=token)
        self.assertFalse(response.json()["created"])

    def test_04_buyer_starts_conversation(self):
        """El comprador contacta al vendedor"""
        print("\n----- Test: Iniciar Conversación -----")
        token = self.__class__.second_user["token"]

        response = self.make_request("POST", "/conversations/", {
            "product_id": self.__class__.product_id,
            "receiver_id": self.__class__.user_id,
        }, token=token)

        print(f"Status Code: {response.status_code}")
        print(f"Response: {response.text[:200]}...")

        self.assertEqual(200, response.status_code)
        self.assertTrue(response.json()["created"])
        self.__class__.conversation_id = response.json()["conversation"]["id"]

        # El vendedor obtiene la misma conversación
        response = self.make_request("POST", "/conversations/", {
            "product_id": self.__class__.product_id,
            "receiver_id": self.__class__.second_user["user_id"],
        })
        self.assertFalse(response.json()["created"])
        self.assertEqual(self.__class__.conversation_id, response.json()["conversation"]["id"])

    def test_05_exchange_messages(self):
        """Intercambio de mensajes en la conversación"""
        print("\n----- Test: Enviar Mensajes -----")
        self.assertTrue(self.__class__.conversation_id, "Conversación no disponible")

        response = self.make_request("POST", "/messages/", {
            "conversation_id": self.__class__.conversation_id,
            "receiver_id": self.__class__.user_id,
            "content": "Hola, ¿sigue disponible?",
        }, token=self.__class__.second_user["token"])
        self.assertEqual(201, response.status_code)

        response = self.make_request("POST", "/messages/", {
            "conversation_id": self.__class__.conversation_id,
            "receiver_id": self.__class__.second_user["user_id"],
            "content": "Sí, sigue disponible",
        })
        self.assertEqual(201, response.status_code)

        response = self.make_request("GET", "/messages/", params={"conversation_id": self.__class__.conversation_id})
        contents = [m["content"] for m in response.json()]
        print(f"Mensajes: {contents}")
        self.assertEqual(["Hola, ¿sigue disponible?", "Sí, sigue disponible"], contents)

    def test_06_seller_inbox(self):
        """El vendedor recibe un aviso de favorito y otro de mensaje"""
        print("\n----- Test: Bandeja del Vendedor -----")

        response = self.make_request("GET", "/notifications/")
        self.assertEqual(200, response.status_code)
        data = response.json()
        print(f"Notificaciones: {[n['type'] for n in data['notifications']]}")

        self.assertEqual(2, data["unread_count"])
        self.assertEqual({"favorite", "message"}, {n["type"] for n in data["notifications"]})
        self.__class__.notification_id = data["notifications"][0]["id"]

    def test_07_mark_notifications_read(self):
        """Marcar una notificación y luego todas como leídas"""
        print("\n----- Test: Marcar Notificaciones -----")
        self.assertTrue(self.__class__.notification_id, "Notificación no disponible")

        response = self.make_request("PUT", f"/notifications/{self.__class__.notification_id}", {"is_read": True})
        self.assertEqual(200, response.status_code)

        response = self.make_request("PUT", "/notifications/mark-all-read")
        self.assertEqual({"updated_count": 1}, response.json())

        response = self.make_request("GET", "/notifications/")
        self.assertEqual(0, response.json()["unread_count"])

    def test_08_product_sold(self):
        """Al vender el producto se avisa a quien lo tenía en favoritos"""
        print("\n----- Test: Producto Vendido -----")

        response = self.make_request("PATCH", f"/products/{self.__class__.product_id}", {"status": "sold"})
        self.assertEqual(200, response.status_code)

        response = self.make_request("GET", "/notifications/", token=self.__class__.second_user["token"])
        types = [n["type"] for n in response.json()["notifications"]]
        print(f"Notificaciones del comprador: {types}")
        self.assertEqual("product_sold", types[0])
        self.assertIn("message", types)


if __name__ == "__main__":
    unittest.main()
