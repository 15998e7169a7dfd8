"""Transparent value encryption (AES-256-GCM)."""

import base64
import json
import logging
import os
from typing import Any, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .base import Middleware
from ..errors import DecryptionError

logger = logging.getLogger(__name__)

KEY_SIZE = 32
NONCE_SIZE = 12
TAG_SIZE = 16
PAYLOAD_FIELDS = frozenset(("iv", "tag", "value"))


class CryptoMiddleware(Middleware):
    """Encrypt values on the way in and decrypt them on the way out.
    
    Values are JSON-encoded, encrypted with a fresh random nonce and stored
    as a mapping of base64 strings::
    
        {"iv": "...", "tag": "...", "value": "..."}
    
    so any driver that can hold a JSON object can hold ciphertext. Reads
    leave values that do not have this shape untouched, which lets an
    existing plaintext store be encrypted gradually.
    
    Args:
        key: 32-byte key, as bytes or a UTF-8 string
    
    Raises:
        ValueError: If the key is missing or not 32 bytes
    """
    
    def __init__(self, key: bytes | str):
        if not key:
            raise ValueError("CryptoMiddleware requires an encryption key")
        if isinstance(key, str):
            key = key.encode("utf-8")
        if len(key) != KEY_SIZE:
            raise ValueError(f"Encryption key must be {KEY_SIZE} bytes for AES-256, got {len(key)}")
        self._aead = AESGCM(key)
    
    def encrypt(self, value: Any) -> dict[str, str]:
        nonce = os.urandom(NONCE_SIZE)
        plaintext = json.dumps(value, ensure_ascii=False).encode("utf-8")
        sealed = self._aead.encrypt(nonce, plaintext, None)
        ciphertext, tag = sealed[:-TAG_SIZE], sealed[-TAG_SIZE:]
        return {
            "iv": base64.b64encode(nonce).decode("ascii"),
            "tag": base64.b64encode(tag).decode("ascii"),
            "value": base64.b64encode(ciphertext).decode("ascii"),
        }
    
    def decrypt(self, payload: dict[str, str]) -> Any:
        """Decrypt a payload produced by :meth:`encrypt`.
        
        Raises:
            DecryptionError: Wrong key, tampered data, or malformed payload
        """
        try:
            nonce = base64.b64decode(payload["iv"], validate=True)
            tag = base64.b64decode(payload["tag"], validate=True)
            ciphertext = base64.b64decode(payload["value"], validate=True)
            plaintext = self._aead.decrypt(nonce, ciphertext + tag, None)
            return json.loads(plaintext.decode("utf-8"))
        except InvalidTag as e:
            raise DecryptionError("Payload failed authentication (wrong key or tampered data)") from e
        except (ValueError, TypeError) as e:
            raise DecryptionError(f"Malformed encrypted payload: {e}") from e
    
    @staticmethod
    def is_payload(value: Any) -> bool:
        return isinstance(value, dict) and value.keys() == PAYLOAD_FIELDS
    
    def before_set(self, key: str, value: Any) -> Optional[dict[str, str]]:
        # None is stored as-is: hooks cannot return a None replacement
        if value is None:
            return None
        return self.encrypt(value)
    
    def after_get(self, key: str, value: Any) -> Any:
        if not self.is_payload(value):
            return None
        return self.decrypt(value)
