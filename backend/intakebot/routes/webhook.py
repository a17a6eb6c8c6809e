"""
Webhook Routes — LINE Messaging API entry point.
Verifies the channel signature, then runs every event in the batch.
"""
from fastapi import APIRouter, Depends, Header, HTTPException, Request
from pydantic import ValidationError

from intakebot.schemas.schemas import WebhookPayload
from intakebot.services.conversation_service import ConversationService, get_conversation_service
from intakebot.utils.logger import log

router = APIRouter(tags=["Webhook"])


@router.post("/webhook")
async def line_webhook(
    request: Request,
    x_line_signature: str = Header(None, alias="X-Line-Signature"),
    service: ConversationService = Depends(get_conversation_service),
):
    """Receive a batch of LINE events and reply to each."""
    body = await request.body()
    if not service.line_client.verify_signature(body, x_line_signature):
        raise HTTPException(status_code=403, detail="Invalid signature")

    try:
        payload = WebhookPayload.model_validate_json(body)
    except ValidationError as e:
        log("WEBHOOK", f"Malformed webhook body: {e}")
        raise HTTPException(status_code=400, detail="Malformed webhook body")

    failures = await service.handle_batch(payload.events)
    failed = sum(1 for f in failures if f is not None)
    if failed:
        raise HTTPException(status_code=500, detail=f"{failed} of {len(failures)} events failed")

    return {"status": "ok", "processed": len(failures)}
