import logging
import time
import uuid
from pathlib import Path
from typing import Optional
from supabase import create_client, Client
from menu_admin.config import settings

logger = logging.getLogger(__name__)

# Max file size: 5MB (bucket limit for menu images)
MAX_FILE_SIZE = 5 * 1024 * 1024

class StorageService:
    """
    Service for publishing files to Supabase Storage.
    Falls back to local storage if Supabase is not configured.
    """

    def __init__(self, local_storage_path: Optional[Path] = None):
        self.supabase_client: Optional[Client] = None
        # Backend always prefers Service Role key for full access (bypass RLS)
        self.key = settings.SUPABASE_SERVICE_ROLE_KEY or settings.SUPABASE_KEY
        self.use_supabase = bool(settings.SUPABASE_URL and self.key)
        self.bucket_name = settings.SUPABASE_MENU_IMAGES_BUCKET

        if self.use_supabase:
            try:
                self.supabase_client = create_client(
                    settings.SUPABASE_URL,
                    self.key
                )
                logger.info("Supabase Storage client initialized")
            except Exception as e:
                logger.warning(f"Failed to initialize Supabase client: {e}. Falling back to local storage.")
                self.use_supabase = False

        # Local storage directory (fallback)
        if not self.use_supabase:
            self.local_storage_path = local_storage_path or Path(settings.LOCAL_STORAGE_PATH)
            self.local_storage_path.mkdir(parents=True, exist_ok=True)
            logger.info(f"Using local storage at {self.local_storage_path}")

    def generate_file_path(self, folder: str, extension: str) -> str:
        """
        Generate a collision-resistant path: {folder}/auto-{unix_ms}-{random}.{ext}
        """
        return f"{folder}/auto-{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}.{extension}"

    async def upload_public_file(self, file_content: bytes, folder: str = "menu-items", extension: str = "jpg", content_type: str = "image/jpeg") -> str:
        """
        Upload raw file content (bytes) and return its public URL.
        Used by the image acquisition pipeline.
        """
        if len(file_content) > MAX_FILE_SIZE:
             raise ValueError(f"File too large. Maximum size: {MAX_FILE_SIZE / (1024 * 1024):.0f}MB")

        file_path = self.generate_file_path(folder, extension)

        if self.use_supabase:
            if not self.supabase_client:
                 raise RuntimeError("Supabase client not initialized")

            try:
                bucket = self.supabase_client.storage.from_(self.bucket_name)
                bucket.upload(
                    path=file_path,
                    file=file_content,
                    file_options={"content-type": content_type, "upsert": "true"}
                )
                public_url = bucket.get_public_url(file_path)
                logger.info(f"File uploaded to Supabase bucket '{self.bucket_name}': {file_path}")
                return public_url
            except Exception as e:
                logger.error(f"Failed to upload to Supabase: {e}", exc_info=True)
                raise e
        else:
            # Local upload
            full_path = self.local_storage_path / self.bucket_name / file_path
            full_path.parent.mkdir(parents=True, exist_ok=True)
            with open(full_path, "wb") as f:
                f.write(file_content)
            logger.info(f"File uploaded locally: {full_path}")
            # Served by the /uploads static mount in main.py
            return f"{settings.PUBLIC_BASE_URL}/uploads/{self.bucket_name}/{file_path}"

_storage_service: Optional[StorageService] = None

def get_storage_service() -> StorageService:
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service
