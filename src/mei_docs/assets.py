"""
External assets: fillable templates on disk and signature images over HTTP.
"""

import io
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional, Union

import requests
from PIL import Image, UnidentifiedImageError

from .errors import SignatureAssetUnavailable, TemplateLoadFailed
from .models import Signer

logger = logging.getLogger(__name__)

SIGNATURE_FORMATS = ("PNG", "JPEG")


class TemplateStore:
    """Resolves fixed logical template names to bytes."""

    def __init__(self, templates_dir: Union[str, Path] = "templates"):
        self.templates_dir = Path(templates_dir)

    def path_for(self, name: str) -> Path:
        return self.templates_dir / name

    def exists(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def load(self, name: str) -> bytes:
        """
        Read a template.

        Raises:
            TemplateLoadFailed: when the file is absent or cannot be read.
        """
        path = self.path_for(name)
        if not path.is_file():
            raise TemplateLoadFailed(name, TemplateLoadFailed.MISSING, str(path))
        try:
            return path.read_bytes()
        except OSError as e:
            raise TemplateLoadFailed(name, TemplateLoadFailed.UNREADABLE, str(e)) from e


def decode_signature(data: bytes) -> Image.Image:
    """
    Decode signature bytes, trying PNG first and then JPEG.

    Images over Pillow's pixel limit are rejected like undecodable ones.

    Raises:
        SignatureAssetUnavailable: when neither decoder accepts the bytes.
    """
    errors = []
    for image_format in SIGNATURE_FORMATS:
        try:
            image = Image.open(io.BytesIO(data), formats=[image_format])
            image.load()
            return image
        except (UnidentifiedImageError, Image.DecompressionBombError,
                OSError, SyntaxError, ValueError) as e:
            errors.append(f"{image_format}: {e}")
    raise SignatureAssetUnavailable("image bytes", "; ".join(errors) or "empty image")


class SignatureLoader:
    """Fetches and validates the signer's signature image."""

    def __init__(self, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()
        self.logger = logging.getLogger(self.__class__.__name__)

    def fetch(self, url: str) -> bytes:
        """
        Download raw image bytes.

        Raises:
            SignatureAssetUnavailable: on network errors or a non-200 response.
        """
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise SignatureAssetUnavailable(url, str(e)) from e

        if response.status_code != 200:
            raise SignatureAssetUnavailable(url, f"HTTP {response.status_code}")
        return response.content

    def resolve(self, signer: Optional[Signer]) -> Optional[Signer]:
        """
        Return the signer with validated image bytes attached.

        Any failure leaves the signer without an image; the document is
        then drawn with an empty signature line.
        """
        if signer is None:
            return None

        data = signer.signature_image
        source = "inline image"
        try:
            if data is None:
                if not signer.signature_url:
                    return signer
                source = signer.signature_url
                data = self.fetch(signer.signature_url)
            decode_signature(data)
        except SignatureAssetUnavailable as e:
            self.logger.warning(f"Signature omitted ({source}): {e.detail}")
            return replace(signer, signature_image=None, signature_url=None)

        return replace(signer, signature_image=data)
