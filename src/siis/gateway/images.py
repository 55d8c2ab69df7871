"""Product image storage in the Firebase Storage bucket."""

import logging
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from urllib.parse import quote, unquote, urlsplit

from firebase_admin.exceptions import FirebaseError
from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError

from .exceptions import GatewayError

logger = logging.getLogger(__name__)

BACKEND_ERRORS = (GoogleAPIError, FirebaseError)

# Storage transfers go over requests; its connection errors are OSErrors
TRANSFER_ERRORS = (*BACKEND_ERRORS, GoogleAuthError, OSError)

DOWNLOAD_HOST = "firebasestorage.googleapis.com"
TOKEN_METADATA_KEY = "firebaseStorageDownloadTokens"


def download_url(bucket_name: str, path: str, token: str) -> str:
    """Build the tokenized download URL Firebase clients use."""
    return (
        f"https://{DOWNLOAD_HOST}/v0/b/{bucket_name}/o/"
        f"{quote(path, safe='')}?alt=media&token={token}"
    )


def storage_path_from_url(url: str) -> str | None:
    """Derive the object path from a stored image URL.

    Understands Firebase download URLs, ``gs://`` URIs and
    ``storage.googleapis.com`` public URLs. Returns None for anything else.
    """
    if not url:
        return None

    parts = urlsplit(url)
    if parts.scheme == "gs":
        path = parts.path.lstrip("/")
        return path or None

    if parts.scheme not in ("http", "https"):
        return None

    if parts.netloc == DOWNLOAD_HOST:
        _, sep, encoded = parts.path.partition("/o/")
        if not sep or not encoded:
            return None
        return unquote(encoded)

    if parts.netloc == "storage.googleapis.com":
        # /<bucket>/<path>
        segments = parts.path.lstrip("/").split("/", 1)
        if len(segments) != 2 or not segments[1]:
            return None
        return unquote(segments[1])

    return None


class ImageStore:
    """Upload, resolve and delete objects in one bucket."""

    def __init__(self, bucket):
        self.bucket = bucket

    def upload(self, file, path: str) -> str:
        """Upload one file and return its download URL."""
        token = uuid.uuid4().hex
        blob = self.bucket.blob(path)
        blob.metadata = {TOKEN_METADATA_KEY: token}

        if hasattr(file, "seek"):
            file.seek(0)

        try:
            blob.upload_from_file(file, content_type=getattr(file, "content_type", None))
        except TRANSFER_ERRORS as e:
            logger.exception(f"Image upload failed for {path}: {e}")
            raise GatewayError("Could not upload image", operation="upload") from e

        url = download_url(self.bucket.name, path, token)
        logger.info(f"Uploaded image {path}")
        return url

    def upload_many(self, files, base_path: str) -> list[str]:
        """Upload files concurrently; URLs come back in input order.

        If any upload fails the ones that succeeded are deleted again and
        the error is raised, so callers never see a partial set.
        """
        files = list(files)
        if not files:
            return []

        stamp = int(time.time() * 1000)
        paths = [f"{base_path}/{stamp}_{index}_{file.name}" for index, file in enumerate(files)]

        with ThreadPoolExecutor(max_workers=len(files)) as pool:
            futures = [pool.submit(self.upload, file, path) for file, path in zip(files, paths)]

        urls = []
        failure = None
        for future in futures:
            try:
                urls.append(future.result())
            except GatewayError as e:
                failure = failure or e

        if failure is not None:
            for url in urls:
                self.delete(url)
            raise failure

        logger.info(f"Uploaded {len(urls)} images under {base_path}")
        return urls

    def resolve(self, path: str) -> str:
        """Turn a storage-relative path into a download URL."""
        try:
            blob = self.bucket.get_blob(path)
        except TRANSFER_ERRORS as e:
            logger.warning(f"Could not look up image {path}: {e}")
            raise GatewayError("Could not resolve image", operation="resolve") from e

        if blob is None:
            raise GatewayError(f"No image stored at {path}", operation="resolve")

        token = (blob.metadata or {}).get(TOKEN_METADATA_KEY, "")
        if token:
            return download_url(self.bucket.name, path, token.split(",")[0])
        return blob.public_url

    def delete(self, url: str):
        """Best-effort delete; failures are logged, never raised."""
        path = storage_path_from_url(url)
        if path is None:
            logger.warning(f"Cannot derive storage path from image URL, skipping delete: {url}")
            return

        try:
            self.bucket.blob(path).delete()
        except TRANSFER_ERRORS as e:
            logger.warning(f"Failed to delete image {path}: {e}")
            return

        logger.info(f"Deleted image {path}")

    def delete_many(self, urls):
        for url in urls:
            self.delete(url)
