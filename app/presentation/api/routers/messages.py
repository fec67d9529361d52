from fastapi import APIRouter, Depends, status

from ....application.services.message_service import MessageService
from ....core.dependencies import get_message_service
from ....domain.models import Account
from ...api.dependencies import require_account
from ...api.schemas.common import ApiResponse
from ...api.schemas.messages import (
    AcceptanceResponse,
    AcceptMessagesRequest,
    MessageResponse,
    MessagesResponse,
    SendMessageRequest,
)

router = APIRouter(prefix="/api", tags=["Messages"])


@router.post("/send-message", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
def send_message(
    payload: SendMessageRequest,
    message_service: MessageService = Depends(get_message_service),
) -> ApiResponse:
    """Public endpoint: anyone holding the link can post, no session needed."""
    message_service.submit(payload.username, payload.content)
    return ApiResponse(message="Message sent successfully")


@router.get("/get-messages", response_model=MessagesResponse)
def get_messages(
    account: Account = Depends(require_account),
    message_service: MessageService = Depends(get_message_service),
) -> MessagesResponse:
    messages = message_service.list_messages(account)
    return MessagesResponse(
        message=f"{len(messages)} message(s)",
        messages=[MessageResponse.from_domain(item) for item in messages],
    )


@router.delete("/delete-message/{message_id}", response_model=ApiResponse)
def delete_message(
    message_id: str,
    account: Account = Depends(require_account),
    message_service: MessageService = Depends(get_message_service),
) -> ApiResponse:
    message_service.delete_message(account, message_id)
    return ApiResponse(message="Message deleted")


@router.get("/accept-messages", response_model=AcceptanceResponse)
def get_accept_messages(
    account: Account = Depends(require_account),
    message_service: MessageService = Depends(get_message_service),
) -> AcceptanceResponse:
    accepting = message_service.get_acceptance(account)
    return AcceptanceResponse(
        message="Accepting messages" if accepting else "Not accepting messages",
        is_accepting_messages=accepting,
    )


@router.post("/accept-messages", response_model=AcceptanceResponse)
def update_accept_messages(
    payload: AcceptMessagesRequest,
    account: Account = Depends(require_account),
    message_service: MessageService = Depends(get_message_service),
) -> AcceptanceResponse:
    updated = message_service.set_acceptance(account, payload.accept_messages)
    return AcceptanceResponse(
        message="Message acceptance status updated successfully",
        is_accepting_messages=updated.is_accepting_messages,
    )
