"""Application tests for direct messaging between accounts."""

import pytest
from messaging.conversation.messaging import conversation_id_for
from shared.errors import AlreadyExists, Forbidden, NotFound, ValidationFailed


@pytest.fixture()
def farmer(make_producer):
    return make_producer()


@pytest.fixture()
def buyer(make_consumer):
    return make_consumer()


def test_conversation_id_is_symmetric():
    assert conversation_id_for("b", "a") == conversation_id_for("a", "b") == "a_b"


class TestSendMessage:
    def test_send_and_read(self, services, buyer, farmer, principal_for):
        messaging = services.messaging
        sent = messaging.send_message(principal_for(buyer), farmer.id, "Are the tomatoes organic?")

        assert sent.conversation_id == conversation_id_for(buyer.id, farmer.id)
        assert messaging.unread_count(principal_for(farmer)) == 1

        messages = messaging.get_messages(principal_for(farmer), sent.conversation_id)
        assert [m.content for m in messages] == ["Are the tomatoes organic?"]
        assert messages[0].read is True
        assert messaging.unread_count(principal_for(farmer)) == 0

    def test_empty_content_rejected(self, services, buyer, farmer, principal_for):
        with pytest.raises(ValidationFailed) as exc:
            services.messaging.send_message(principal_for(buyer), farmer.id, "   ")
        assert "content" in exc.value.errors

    def test_too_long_rejected(self, services, buyer, farmer, principal_for):
        with pytest.raises(ValidationFailed):
            services.messaging.send_message(principal_for(buyer), farmer.id, "x" * 1001)

    def test_cannot_message_self(self, services, buyer, principal_for):
        with pytest.raises(ValidationFailed) as exc:
            services.messaging.send_message(principal_for(buyer), buyer.id, "hello me")
        assert "recipient_id" in exc.value.errors

    def test_unknown_recipient(self, services, buyer, principal_for):
        with pytest.raises(NotFound) as exc:
            services.messaging.send_message(principal_for(buyer), "missing", "hello")
        assert exc.value.entity == "Recipient"


class TestConversations:
    def test_start_with_opening_message(self, services, buyer, farmer, principal_for):
        conversation = services.messaging.start_conversation(principal_for(buyer), farmer.id, "Hello!")

        [view] = services.messaging.list_conversations(principal_for(farmer))
        assert view.id == conversation.id
        assert view.last_message == "Hello!"
        assert view.unread is True

    def test_start_twice(self, services, buyer, farmer, principal_for):
        services.messaging.start_conversation(principal_for(buyer), farmer.id)
        with pytest.raises(AlreadyExists):
            services.messaging.start_conversation(principal_for(buyer), farmer.id)

    def test_outsider_cannot_read(self, services, buyer, farmer, make_consumer, principal_for):
        sent = services.messaging.send_message(principal_for(buyer), farmer.id, "hi")
        with pytest.raises(Forbidden):
            services.messaging.get_messages(principal_for(make_consumer()), sent.conversation_id)

    def test_mark_read(self, services, buyer, farmer, principal_for):
        sent = services.messaging.send_message(principal_for(buyer), farmer.id, "hi")
        services.messaging.mark_read(principal_for(farmer), sent.conversation_id)
        assert services.messaging.unread_count(principal_for(farmer)) == 0

    def test_delete(self, services, buyer, farmer, principal_for):
        sent = services.messaging.send_message(principal_for(buyer), farmer.id, "hi")
        services.messaging.delete_conversation(principal_for(buyer), sent.conversation_id)
        assert services.messaging.list_conversations(principal_for(buyer)) == []
