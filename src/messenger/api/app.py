"""
HTTP transport.

Five POST routes, each a thin adapter: FastAPI decodes the JSON body into the
operation's input model, the route delegates to 'MessengerController', and
the result is encoded as JSON. Failures are turned into a '{"message": ...}'
body by the handlers in 'messenger.api.errors': 'MessengerError' with its
mapped status code, anything else as 500.

    POST /users/add      {"username"}              -> {"id"}
    POST /chats/add      {"name", "users"}         -> {"id"}
    POST /messages/add   {"chat", "author", "text"} -> {"id"}
    POST /chats/get      {"user"}                  -> {"chats": [...]}
    POST /messages/get   {"chat"}                  -> {"messages": [...]}
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from loguru import logger
from pydantic import BaseModel

from messenger.api.errors import (
    messenger_error_handler,
    request_validation_error_handler,
    unhandled_error_handler,
)
from messenger.controller import MessengerController
from messenger.data_models.chat import Chat, ChatInput, ChatRef
from messenger.data_models.message import Message, MessageInput
from messenger.data_models.user import UserInput, UserRef
from messenger.exceptions import MessengerError


class IdResponse(BaseModel):
    id: str


class ChatsResponse(BaseModel):
    chats: list[Chat]


class MessagesResponse(BaseModel):
    messages: list[Message]


def get_controller(request: Request) -> MessengerController:
    return request.app.state.controller


Controller = Annotated[MessengerController, Depends(get_controller)]

router = APIRouter()


@router.post("/users/add")
async def add_user(body: UserInput, controller: Controller) -> IdResponse:
    return IdResponse(id=await controller.add_user(body))


@router.post("/chats/add")
async def add_chat(body: ChatInput, controller: Controller) -> IdResponse:
    return IdResponse(id=await controller.add_chat(body))


@router.post("/messages/add")
async def add_message(body: MessageInput, controller: Controller) -> IdResponse:
    return IdResponse(id=await controller.add_message(body))


@router.post("/chats/get")
async def get_chats(body: UserRef, controller: Controller) -> ChatsResponse:
    return ChatsResponse(chats=await controller.get_chats(body.user))


@router.post("/messages/get")
async def get_messages(body: ChatRef, controller: Controller) -> MessagesResponse:
    return MessagesResponse(messages=await controller.get_messages(body.chat))


def create_app(controller: MessengerController, connect_timeout: float = 10.0) -> FastAPI:
    """Build the FastAPI application around an already constructed controller.

    On startup the store is pinged under 'connect_timeout'; on shutdown it is
    closed. The controller's lifecycle otherwise belongs to the caller.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        async with asyncio.timeout(connect_timeout):
            await controller.store.ping()
        logger.info("Messenger API ready")
        try:
            yield
        finally:
            await controller.store.close()

    app = FastAPI(title="Messenger", lifespan=lifespan)
    app.state.controller = controller
    app.include_router(router)
    app.add_exception_handler(MessengerError, messenger_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
    return app
