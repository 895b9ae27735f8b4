import asyncio
import logging

import boto3
from botocore.config import Config

from core.exceptions import StorageError

logger = logging.getLogger(__name__)


class R2Service:
    """Upload das imagens dos feedbacks para um bucket Cloudflare R2 (API S3)."""

    def __init__(self, account_id: str, access_key: str, secret_key: str,
                 bucket_name: str, public_url: str = "", s3_client=None):
        self.bucket_name = bucket_name
        self.endpoint_url = f"https://{account_id}.r2.cloudflarestorage.com"
        self.public_url = public_url.rstrip("/")

        self.s3_client = s3_client or boto3.client(
            service_name="s3",
            endpoint_url=self.endpoint_url,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            config=Config(signature_version="s3v4"),
            region_name="auto"
        )

    def public_url_for(self, key: str) -> str:
        if self.public_url:
            return f"{self.public_url}/{key}"
        return f"{self.endpoint_url}/{self.bucket_name}/{key}"

    async def upload_image(self, file_name: str, data: bytes, content_type: str = "image/jpeg") -> str:
        """Envia a imagem e devolve a URL pública. Lança StorageError em qualquer falha."""
        logger.info("Uploading file %s to bucket %s", file_name, self.bucket_name)
        try:
            await asyncio.to_thread(self._upload, data, file_name, content_type)
        except Exception as e:
            logger.error("Failed to upload %s: %s", file_name, e)
            raise StorageError(f"Storage upload failed: {e}") from e
        return self.public_url_for(file_name)

    def _upload(self, body, key, content_type):
        self.s3_client.put_object(
            Bucket=self.bucket_name,
            Key=key,
            Body=body,
            ContentType=content_type,
            CacheControl="max-age=3600"
        )
