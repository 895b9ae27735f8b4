"""Rotas do webhook da WhatsApp Cloud API."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from client.whatsapp.V24 import WhatsAppClient
from core.dependencies import get_conversation_service, get_whatsapp_client
from domain.webhook.message import InboundMessage
from services.conversation_service import ConversationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["WhatsApp"])


@router.get("/webhook")
async def verify_webhook(request: Request, client: WhatsAppClient = Depends(get_whatsapp_client)):
    """Verificação do webhook (GET)"""
    return await client.verify_webhook(request)


@router.post("/webhook")
async def receive_webhook(
    request: Request,
    conversation: ConversationService = Depends(get_conversation_service)
):
    """Recebimento de notificações (POST)"""
    try:
        data = await request.json()
        messages = InboundMessage.parse_webhook(data)

        # Status de entrega/leitura chegam sem "messages" e são ignorados
        for msg in messages:
            await conversation.process_incoming_message(msg)

        if messages:
            logger.info("Processado(s) %s evento(s)", len(messages))
        return {"status": "ok"}
    except Exception as e:
        logger.exception("Erro no webhook: %s", e)
        raise HTTPException(status_code=500, detail="Internal Server Error")
