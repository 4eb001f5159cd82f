import pytest
from bson import ObjectId

from messenger.controller import MessengerController
from messenger.data_models.chat import ChatInput
from messenger.data_models.message import MessageInput
from messenger.data_models.user import UserInput
from messenger.exceptions import (
    AuthorNotInChatError,
    DuplicateUsernameError,
    PartialWriteError,
    UnknownChatError,
    UnknownUserError,
)
from messenger.orchestrator import WriteProgress, WriteState

from conftest import FakeClock, FaultyStore


async def test_add_user_returns_distinct_ids(controller: MessengerController, store: FaultyStore) -> None:
    ids = [await controller.add_user(UserInput(username=name)) for name in ("ada", "bob", "cy")]

    assert len(set(ids)) == 3
    assert store.count("users") == 3
    user = await controller.user_db.get_user_by_id(ids[0])
    assert user is not None
    assert user.chats == []


async def test_duplicate_username_creates_nothing(controller: MessengerController, store: FaultyStore) -> None:
    await controller.add_user(UserInput(username="ada"))

    with pytest.raises(DuplicateUsernameError):
        await controller.add_user(UserInput(username="ada"))
    assert store.count("users") == 1


async def test_client_supplied_server_fields_are_ignored(controller: MessengerController) -> None:
    bogus = str(ObjectId())
    user_input = UserInput.model_validate({"username": "ada", "chats": [bogus], "created_at": "1999-01-01T00:00:00Z"})

    user_id = await controller.add_user(user_input)

    user = await controller.user_db.get_user_by_id(user_id)
    assert user is not None
    assert user.chats == []
    assert user.created_at.year != 1999


async def test_add_chat_backlinks_every_member(controller: MessengerController, clock: FakeClock) -> None:
    u1 = await controller.add_user(UserInput(username="ada"))
    u2 = await controller.add_user(UserInput(username="bob"))

    chat_id = await controller.add_chat(ChatInput(name="general", users=[u1, u2]))

    chat = await controller.chat_db.get_chat_by_id(chat_id)
    assert chat is not None
    assert chat.users == [u1, u2]
    assert chat.messages == []
    assert chat.last_message_at == chat.created_at
    for user_id in (u1, u2):
        user = await controller.user_db.get_user_by_id(user_id)
        assert user is not None
        assert user.chats == [chat_id]


async def test_add_chat_collapses_repeated_members(controller: MessengerController) -> None:
    u1 = await controller.add_user(UserInput(username="ada"))

    chat_id = await controller.add_chat(ChatInput(name="general", users=[u1, u1]))

    user = await controller.user_db.get_user_by_id(u1)
    assert user is not None
    assert user.chats == [chat_id]


async def test_add_chat_with_unknown_user_persists_nothing(controller: MessengerController, store: FaultyStore) -> None:
    u1 = await controller.add_user(UserInput(username="ada"))
    missing = str(ObjectId())

    with pytest.raises(UnknownUserError) as excinfo:
        await controller.add_chat(ChatInput(name="general", users=[u1, missing]))

    assert excinfo.value.user_id == missing
    assert store.count("chats") == 0
    user = await controller.user_db.get_user_by_id(u1)
    assert user is not None
    assert user.chats == []


async def test_add_chat_partial_backfill_is_reported_not_repaired(
    controller: MessengerController, store: FaultyStore
) -> None:
    u1, u2, u3 = [await controller.add_user(UserInput(username=name)) for name in ("ada", "bob", "cy")]
    store.fail_next_updates_at(2)

    with pytest.raises(PartialWriteError) as excinfo:
        await controller.add_chat(ChatInput(name="general", users=[u1, u2, u3]))

    error = excinfo.value
    chat_doc = store.collections["chats"][0]
    chat_id = str(chat_doc["_id"])
    assert error.operation == "add_chat"
    assert error.committed == [f"chats/{chat_id}", f"users/{u1}.chats"]
    assert u2 in error.failed_step
    assert [str(u) for u in chat_doc["users"]] == [u1, u2, u3]

    linked = [await controller.user_db.get_user_by_id(u) for u in (u1, u2, u3)]
    assert [user.chats if user else None for user in linked] == [[chat_id], [], []]


async def test_add_message_links_chat_and_moves_last_message_at(
    controller: MessengerController, clock: FakeClock
) -> None:
    author = await controller.add_user(UserInput(username="ada"))
    chat_id = await controller.add_chat(ChatInput(name="general", users=[author]))

    message_id = await controller.add_message(MessageInput(chat=chat_id, author=author, text="hello"))

    message = await controller.message_db.get_message_by_id(message_id)
    chat = await controller.chat_db.get_chat_by_id(chat_id)
    assert message is not None and chat is not None
    assert chat.messages == [message_id]
    assert chat.last_message_at == message.created_at == clock.readings[-1]


async def test_rejected_message_leaves_chat_untouched(controller: MessengerController, store: FaultyStore) -> None:
    member = await controller.add_user(UserInput(username="ada"))
    outsider = await controller.add_user(UserInput(username="bob"))
    chat_id = await controller.add_chat(ChatInput(name="general", users=[member]))
    before = await controller.chat_db.get_chat_by_id(chat_id)

    with pytest.raises(AuthorNotInChatError):
        await controller.add_message(MessageInput(chat=chat_id, author=outsider, text="hi"))
    with pytest.raises(UnknownChatError):
        await controller.add_message(MessageInput(chat=str(ObjectId()), author=member, text="hi"))

    after = await controller.chat_db.get_chat_by_id(chat_id)
    assert after == before
    assert store.count("messages") == 0


async def test_add_message_orphan_is_reported(controller: MessengerController, store: FaultyStore) -> None:
    author = await controller.add_user(UserInput(username="ada"))
    chat_id = await controller.add_chat(ChatInput(name="general", users=[author]))
    before = await controller.chat_db.get_chat_by_id(chat_id)
    store.fail_next_updates_at(1)

    with pytest.raises(PartialWriteError) as excinfo:
        await controller.add_message(MessageInput(chat=chat_id, author=author, text="hello"))

    assert store.count("messages") == 1
    message_id = str(store.collections["messages"][0]["_id"])
    assert excinfo.value.committed == [f"messages/{message_id}"]
    assert await controller.chat_db.get_chat_by_id(chat_id) == before


async def test_progress_walks_the_state_machine(controller: MessengerController) -> None:
    author = await controller.add_user(UserInput(username="ada"))
    progress = WriteProgress("add_chat")

    chat_id = await controller.orchestrator.add_chat(ChatInput(name="general", users=[author]), progress)

    assert progress.state is WriteState.COMPLETED
    assert progress.entity_id == chat_id
    assert progress.committed == [f"chats/{chat_id}", f"users/{author}.chats"]


async def test_progress_records_state_at_failure(controller: MessengerController, store: FaultyStore) -> None:
    author = await controller.add_user(UserInput(username="ada"))
    store.fail_next_updates_at(1)
    progress = WriteProgress("add_chat")

    with pytest.raises(PartialWriteError):
        await controller.orchestrator.add_chat(ChatInput(name="general", users=[author]), progress)

    assert progress.state is WriteState.FAILED
    assert progress.failed_in is WriteState.PRIMARY_INSERTED

    rejected = WriteProgress("add_user")
    with pytest.raises(DuplicateUsernameError):
        await controller.orchestrator.add_user(UserInput(username="ada"), rejected)
    assert rejected.failed_in is WriteState.RECEIVED
    assert rejected.committed == []
