"""
WhatsApp Cloud API - Cliente para envio de mensagens e download de mídia
Documentação: https://developers.facebook.com/docs/whatsapp/cloud-api/reference/messages
"""
import logging
from typing import List, Dict, Any, Optional

import httpx
from fastapi import HTTPException, Request
from fastapi.responses import PlainTextResponse

from core.exceptions import (
    MediaError,
    MediaNotFoundError,
    MediaAuthError,
    MediaTimeoutError,
    MediaDownloadError,
)
from utils.retry import RetryPolicy, RetryExhausted

logger = logging.getLogger(__name__)

# Código de erro da Graph API para token inválido/expirado
TOKEN_EXPIRED_CODE = 190


class WhatsAppClient:
    """Cliente para enviar mensagens e baixar mídias via WhatsApp Cloud API"""

    def __init__(self,
                 phone_id: str,
                 wa_token: str,
                 base_url: str,
                 verify_token: str,
                 language_code: str = "en",
                 request_timeout: float = 30,
                 media_url_timeout: float = 5,
                 download_timeout: float = 30,
                 download_policy: RetryPolicy = None,
                 transport: httpx.AsyncBaseTransport = None):
        self.phone_id = phone_id
        self.wa_token = wa_token
        self.base_url = base_url.rstrip("/")
        self.language_code = language_code
        self._verify_token = verify_token
        self._request_timeout = request_timeout
        self._media_url_timeout = media_url_timeout
        self._download_timeout = download_timeout
        self._download_policy = download_policy or RetryPolicy()
        self._transport = transport
        self.headers = {
            "Authorization": f"Bearer {self.wa_token}",
            "Content-Type": "application/json"
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport)

    async def _send_request(self, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Envia a mensagem. Fire-and-forget: falhas são logadas e retornam None.
        """
        try:
            async with self._client() as client:
                response = await client.post(
                    f"{self.base_url}/{self.phone_id}/messages",
                    headers=self.headers,
                    json=payload,
                    timeout=self._request_timeout
                )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error("Erro na API WhatsApp (%s) para %s: %s",
                         payload.get("type"), payload.get("to"), e.response.text)
        except httpx.HTTPError as e:
            logger.error("Erro na API WhatsApp (%s) para %s: %s",
                         payload.get("type"), payload.get("to"), e)
        return None

    # ===== ENVIO DE MENSAGENS =====

    async def send_text(self, to: str, text: str, preview_url: bool = False) -> Optional[Dict[str, Any]]:
        payload = {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": to,
            "type": "text",
            "text": {"preview_url": preview_url, "body": text}
        }
        return await self._send_request(payload)

    async def send_template(
        self,
        to: str,
        template_name: str,
        language_code: str = None,
        components: List[Dict[str, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Envia mensagem de template (os botões Yes/No e as categorias
        ficam definidos no próprio template aprovado na Meta)

        Args:
            to: Número do destinatário
            template_name: Nome do template
            language_code: Código do idioma (default: o do cliente)
            components: Componentes variáveis do template (header, body, etc)
        """
        template_payload = {
            "name": template_name,
            "language": {
                "code": language_code or self.language_code
            }
        }

        if components:
            template_payload["components"] = components

        payload = {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": to,
            "type": "template",
            "template": template_payload
        }

        logger.info("Enviando template '%s' para %s", template_name, to)
        return await self._send_request(payload)

    # ===== RECEBIMENTO =====

    async def verify_webhook(self, request: Request):
        """Webhook verification handshake.

        Must echo back hub.challenge when hub.verify_token matches configured token.
        """
        mode = request.query_params.get("hub.mode")
        challenge = request.query_params.get("hub.challenge")
        token = request.query_params.get("hub.verify_token")

        if mode == "subscribe" and self._verify_token and token == self._verify_token:
            logger.info("Webhook verified by Meta")
            return PlainTextResponse(content=challenge or "", status_code=200)

        logger.warning("Webhook verification failed (mode=%s)", mode)
        raise HTTPException(status_code=403, detail="Verification failed")

    # ===== GESTÃO DE MÍDIA =====

    async def get_media_url(self, media_id: str) -> str:
        """Recupera a URL temporária de download de uma mídia"""
        logger.info("Fetching media URL for ID: %s", media_id)
        try:
            async with self._client() as client:
                response = await client.get(
                    f"{self.base_url}/{media_id}",
                    headers=self.headers,
                    timeout=self._media_url_timeout
                )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise MediaTimeoutError("Request timeout. Please try again.") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            try:
                error_code = e.response.json().get("error", {}).get("code")
            except ValueError:
                error_code = None
            logger.error("Error fetching media URL %s: status=%s body=%s", media_id, status, e.response.text)

            if status == 401 or error_code == TOKEN_EXPIRED_CODE:
                raise MediaAuthError("Access token is invalid or expired. Please refresh your token.") from e
            if status == 404:
                raise MediaNotFoundError("Media not found. The media may have expired.") from e
            raise MediaError(f"Unable to fetch media URL: {e}") from e
        except httpx.HTTPError as e:
            raise MediaError(f"Unable to fetch media URL: {e}") from e

        url = response.json().get("url")
        if not url:
            raise MediaError("No URL found in response")
        return url

    async def _download_once(self, media_url: str) -> bytes:
        async with self._client() as client:
            response = await client.get(
                media_url,
                headers={"Authorization": f"Bearer {self.wa_token}"},
                timeout=self._download_timeout
            )
        response.raise_for_status()
        return response.content

    async def download_media(self, media_url: str) -> bytes:
        """
        Baixa o binário da mídia usando a URL obtida, com retry.
        Requer header Authorization: Bearer {token}
        """
        try:
            return await self._download_policy.run(
                lambda: self._download_once(media_url),
                label="Media download"
            )
        except RetryExhausted as e:
            raise MediaDownloadError(str(e)) from e.last_error
