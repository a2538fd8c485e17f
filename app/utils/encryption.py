# ===== app/utils/encryption.py =====
from typing import Optional

from cryptography.fernet import Fernet


# Generate a key once and store it in your env as CALENDAR_ENCRYPTION_KEY
# CALENDAR_ENCRYPTION_KEY = Fernet.generate_key()


def get_cipher(key: str) -> Fernet:
    """Get Fernet cipher instance"""
    if not key:
        raise ValueError("CALENDAR_ENCRYPTION_KEY is not set")
    return Fernet(key.encode() if isinstance(key, str) else key)


def encrypt_token(cipher: Fernet, token: Optional[str]) -> Optional[bytes]:
    """Encrypt a token string"""
    if not token:
        return None
    return cipher.encrypt(token.encode())


def decrypt_token(cipher: Fernet, encrypted_token: Optional[bytes]) -> Optional[str]:
    """Decrypt a token; raises cryptography.fernet.InvalidToken on tampered data"""
    if not encrypted_token:
        return None
    return cipher.decrypt(encrypted_token).decode()
