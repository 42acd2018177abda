import unittest
from unittest import mock

from helpers import API, APITestCase

from app.core.exceptions import InvalidInputError, NotFoundError
from app.models.conversation import Conversation
from app.services import conversations as conversation_service


class ConversationKeyTestCase(unittest.TestCase):
    def test_key_is_independent_of_participant_order(self):
        self.assertEqual(
            conversation_service.conversation_key(["user-b", "user-a"], "prod-1"),
            conversation_service.conversation_key(["user-a", "user-b"], "prod-1"),
        )
        self.assertEqual("user-a-user-b-prod-1", conversation_service.conversation_key({"user-b", "user-a"}, "prod-1"))

    def test_key_changes_with_product(self):
        self.assertNotEqual(
            conversation_service.conversation_key(["a", "b"], "p1"),
            conversation_service.conversation_key(["a", "b"], "p2"),
        )

    def test_key_requires_two_distinct_participants(self):
        with self.assertRaises(InvalidInputError):
            conversation_service.conversation_key(["a"], "p1")
        with self.assertRaises(InvalidInputError):
            conversation_service.conversation_key(["a", "a"], "p1")
        with self.assertRaises(InvalidInputError):
            conversation_service.conversation_key(["a", "b", "c"], "p1")


class ConversationStoreTestCase(APITestCase):
    def setUp(self):
        super().setUp()
        self.seller = self.register_user("Vendedora Ana")
        self.buyer = self.register_user("Comprador Luis")
        self.product = self.create_product(self.seller)

    def test_both_participants_resolve_to_same_conversation(self):
        first = self.start_conversation(self.buyer, self.seller, self.product["id"])
        second = self.start_conversation(self.seller, self.buyer, self.product["id"])

        self.assertTrue(first["created"])
        self.assertFalse(second["created"])
        self.assertEqual(first["conversation"]["id"], second["conversation"]["id"])
        self.assertEqual(
            sorted([self.seller["id"], self.buyer["id"]]),
            first["conversation"]["participant_ids"],
        )

        with self.new_session() as db:
            self.assertEqual(1, db.query(Conversation).count())

    def test_different_products_get_different_conversations(self):
        other_product = self.create_product(self.seller, title="Casco")
        first = self.start_conversation(self.buyer, self.seller, self.product["id"])
        second = self.start_conversation(self.buyer, self.seller, other_product["id"])
        self.assertNotEqual(first["conversation"]["id"], second["conversation"]["id"])

    def test_race_on_first_contact_is_recovered_by_refetch(self):
        participants = {self.seller["id"], self.buyer["id"]}
        key = conversation_service.conversation_key(participants, self.product["id"])
        first, second = sorted(participants)

        # Otra petición ya insertó la conversación
        with self.new_session() as db:
            winner = Conversation(
                participant_one_id=first,
                participant_two_id=second,
                product_id=self.product["id"],
                conversation_key=key,
            )
            db.add(winner)
            db.commit()
            winner_id = winner.id

        # La primera búsqueda llega antes de que la otra petición confirme
        real_lookup = conversation_service.find_conversation_by_key
        calls = []

        def stale_then_real(db, k):
            calls.append(k)
            return None if len(calls) == 1 else real_lookup(db, k)

        with mock.patch.object(conversation_service, "find_conversation_by_key", side_effect=stale_then_real):
            with self.new_session() as db:
                conversation, created = conversation_service.get_or_create_conversation(
                    db, participants, self.product["id"]
                )

        self.assertFalse(created)
        self.assertEqual(winner_id, conversation.id)
        self.assertEqual(2, len(calls))
        with self.new_session() as db:
            self.assertEqual(1, db.query(Conversation).filter(Conversation.conversation_key == key).count())

    def test_cannot_start_conversation_with_yourself(self):
        response = self.client.post(
            f"{API}/conversations/",
            json={"product_id": self.product["id"], "receiver_id": self.buyer["id"]},
            headers=self.buyer["headers"],
        )
        self.assertEqual(400, response.status_code)

    def test_unknown_product_or_receiver_is_rejected(self):
        response = self.client.post(
            f"{API}/conversations/",
            json={"product_id": "no-existe", "receiver_id": self.seller["id"]},
            headers=self.buyer["headers"],
        )
        self.assertEqual(404, response.status_code)

        response = self.client.post(
            f"{API}/conversations/",
            json={"product_id": self.product["id"], "receiver_id": "no-existe"},
            headers=self.buyer["headers"],
        )
        self.assertEqual(404, response.status_code)

    def test_non_participant_gets_same_error_as_missing_conversation(self):
        conversation = self.start_conversation(self.buyer, self.seller, self.product["id"])["conversation"]
        outsider = self.register_user("Curiosa Eva")

        foreign = self.client.get(f"{API}/conversations/{conversation['id']}", headers=outsider["headers"])
        missing = self.client.get(f"{API}/conversations/no-existe", headers=outsider["headers"])

        self.assertEqual(404, foreign.status_code)
        self.assertEqual(missing.status_code, foreign.status_code)
        self.assertEqual(missing.json(), foreign.json())

        with self.new_session() as db:
            with self.assertRaises(NotFoundError):
                conversation_service.get_conversation_for_participant(db, conversation["id"], outsider["id"])

    def test_list_conversations_includes_unread_counts(self):
        conversation = self.start_conversation(self.buyer, self.seller, self.product["id"])["conversation"]
        self.send_message(self.buyer, conversation["id"], self.seller["id"], "¿Sigue disponible?")
        self.send_message(self.buyer, conversation["id"], self.seller["id"], "Puedo recogerla hoy")

        response = self.client.get(f"{API}/conversations/", headers=self.seller["headers"])
        self.assertEqual(200, response.status_code)
        conversations = response.json()
        self.assertEqual(1, len(conversations))
        self.assertEqual(2, conversations[0]["unread_count"])
        self.assertEqual("Puedo recogerla hoy", conversations[0]["last_message"]["content"])

        response = self.client.get(f"{API}/conversations/", headers=self.buyer["headers"])
        self.assertEqual(0, response.json()[0]["unread_count"])


if __name__ == "__main__":
    unittest.main()
