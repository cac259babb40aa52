"""
Stockage objet S3-compatible (MinIO, AWS S3, Supabase Storage via S3) pour les PDF d'attestation.

Usage :
    storage = StorageService()
    storage.upload_pdf("attestation_<token>_<ts>.pdf", pdf_bytes)
    url = storage.get_public_url("attestation_<token>_<ts>.pdf")
"""

import logging

import boto3
from botocore.client import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from app.config import settings
from app.exceptions import UploadError

logger = logging.getLogger(__name__)


class StorageService:
    """Client du bucket des attestations, configuré depuis Settings."""

    def __init__(self, client=None):
        self.bucket = settings.S3_BUCKET
        self.public_url = settings.S3_PUBLIC_URL.rstrip("/")
        self.client = client or boto3.client(
            "s3",
            endpoint_url=settings.S3_ENDPOINT or None,
            aws_access_key_id=settings.S3_ACCESS_KEY or None,
            aws_secret_access_key=settings.S3_SECRET_KEY or None,
            region_name=settings.S3_REGION,
            config=BotoConfig(signature_version="s3v4"),
        )

    def upload_pdf(self, key: str, data: bytes) -> None:
        """Envoie un PDF dans le bucket. Lève UploadError si le stockage refuse l'écriture."""
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType="application/pdf",
            )
        except (ClientError, BotoCoreError) as exc:
            logger.error("Échec upload %s dans le bucket %s : %s", key, self.bucket, exc)
            raise UploadError(f"Erreur upload: {exc}") from exc

        logger.info("PDF %s stocké dans le bucket %s (%d octets)", key, self.bucket, len(data))

    def get_public_url(self, key: str) -> str:
        """URL publique d'un objet du bucket."""
        return f"{self.public_url}/{key}"


def get_storage() -> StorageService:
    """Dépendance FastAPI : fournit le client de stockage."""
    return StorageService()
