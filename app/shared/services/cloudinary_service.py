# app/shared/services/cloudinary_service.py

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader
from fastapi import UploadFile, HTTPException
from app.config.settings import settings
from typing import Any, Dict, Optional
import re
import uuid
import logging

from app.shared.utils.helpers import utcnow

logger = logging.getLogger(__name__)

class CloudinaryService:

    def __init__(self):
        """Configure Cloudinary from settings"""
        if not all([settings.cloudinary_cloud_name, settings.cloudinary_api_key, settings.cloudinary_api_secret]):
            logger.warning("⚠️ Cloudinary is not fully configured, uploads are disabled")
            self.configured = False
            return

        cloudinary.config(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            secure=True
        )
        self.configured = True
        logger.info("✅ Cloudinary configured")

    def _ensure_configured(self) -> None:
        if not self.configured:
            raise HTTPException(
                status_code=503,
                detail="File storage is not configured"
            )

    async def _read_validated(self, upload: UploadFile, allowed_types: set, max_size: int) -> bytes:
        if upload.content_type not in allowed_types:
            raise HTTPException(
                status_code=400,
                detail=f"Unsupported file type: {upload.content_type}"
            )

        await upload.seek(0)
        content = await upload.read()

        if len(content) > max_size:
            raise HTTPException(
                status_code=400,
                detail=f"File must not exceed {max_size // (1024 * 1024)}MB"
            )
        return content

    def _upload(self, content: bytes, public_id: str, **options) -> Dict[str, Any]:
        logger.info(f"📤 Uploading to Cloudinary: {public_id}")
        try:
            result = cloudinary.uploader.upload(
                content,
                public_id=public_id,
                overwrite=False,
                unique_filename=True,
                use_filename=False,
                **options
            )
        except cloudinary.exceptions.Error as e:
            logger.error(f"❌ Cloudinary upload failed: {str(e)}")
            raise HTTPException(status_code=502, detail=f"Error uploading file: {str(e)}")

        if 'secure_url' not in result:
            logger.error(f"❌ Cloudinary returned no URL for {public_id}: {result}")
            raise HTTPException(status_code=502, detail="Error uploading file: no URL returned")

        logger.info(f"✅ Uploaded {result.get('bytes', 0)} bytes: {result['secure_url']}")
        return result

    async def upload_shipment_document(
        self,
        document: UploadFile,
        tracking_number: str,
        user_id
    ) -> str:
        """
        Upload a shipment document (waybill, invoice, photo)

        Args:
            document: PDF or image file
            tracking_number: Shipment the document belongs to
            user_id: Uploader

        Returns:
            str: Secure URL of the stored file
        """
        self._ensure_configured()
        content = await self._read_validated(
            document, settings.allowed_document_formats, settings.max_document_size
        )

        timestamp = utcnow().strftime("%Y%m%d_%H%M%S")
        file_id = str(uuid.uuid4())[:8]
        public_id = f"{self._sanitize_filename(tracking_number)}_{timestamp}_{file_id}"

        result = self._upload(
            content,
            public_id,
            folder=f"{settings.cloudinary_folder}/documents",
            resource_type="auto",
            tags=["shipment_document", f"user_{user_id}", f"shipment_{tracking_number}"]
        )
        return result["secure_url"]

    async def upload_avatar(self, image: UploadFile, user_id) -> str:
        """Upload a profile picture, cropped to a square"""
        self._ensure_configured()
        content = await self._read_validated(
            image, settings.allowed_image_formats, settings.max_image_size
        )

        result = self._upload(
            content,
            f"user_{user_id}_{str(uuid.uuid4())[:8]}",
            folder=f"{settings.cloudinary_folder}/avatars",
            resource_type="image",
            transformation=[
                {"width": 400, "height": 400, "crop": "fill", "gravity": "face", "quality": "auto:good"}
            ],
            tags=["avatar", f"user_{user_id}"]
        )
        return result["secure_url"]

    def delete_file(self, file_url: str) -> bool:
        """Remove a previously uploaded file; failures are logged and reported as False"""
        if not self.configured:
            return False

        public_id = self._extract_public_id_from_url(file_url)
        if not public_id:
            logger.warning(f"⚠️ Could not extract public_id from URL: {file_url}")
            return False

        try:
            result = cloudinary.uploader.destroy(public_id)
        except cloudinary.exceptions.Error as e:
            logger.error(f"❌ Error deleting {public_id}: {str(e)}")
            return False

        success = result.get("result") == "ok"
        if success:
            logger.info(f"🗑️ Deleted {public_id}")
        else:
            logger.warning(f"⚠️ Could not delete {public_id}: {result}")
        return success

    def _extract_public_id_from_url(self, file_url: str) -> Optional[str]:
        """
        public_id from a Cloudinary URL

        Format: https://res.cloudinary.com/[cloud]/image/upload/[transformations/]v[version]/[public_id].[format]
        """
        if not file_url or "cloudinary.com" not in file_url:
            return None

        parts = file_url.split("/")
        if "upload" not in parts:
            return None

        filtered_parts = []
        for part in parts[parts.index("upload") + 1:]:
            # Transformations
            if "," in part or re.match(r"^[a-z]{1,2}_", part):
                continue
            # Version (v123456)
            if part.startswith("v") and part[1:].isdigit():
                continue
            filtered_parts.append(part)

        if not filtered_parts:
            return None

        public_id = "/".join(filtered_parts)
        if "." in public_id:
            public_id = public_id.rsplit(".", 1)[0]
        return public_id

    def _sanitize_filename(self, filename: str) -> str:
        sanitized = re.sub(r'[^a-zA-Z0-9_-]', '_', filename)[:50]
        return sanitized or "file"

# ==================== GLOBAL INSTANCE ====================

cloudinary_service = CloudinaryService()
