import os

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt


IV_BYTES = 16
KEY_BYTES = 32


def derive_key(password: str, salt: str) -> bytes:
    kdf = Scrypt(salt=salt.encode("utf-8"), length=KEY_BYTES, n=2**14, r=8, p=1)
    return kdf.derive(password.encode("utf-8"))


class CredentialCipher:
    """
    AES-256-CTR over UTF-8 text, key derived with scrypt.

    Each call to `encrypt` draws a fresh random IV and emits
    hex(iv || ciphertext), so equal plaintexts never share a ciphertext.
    """

    def __init__(self, password: str, salt: str):
        if not password:
            raise ValueError("encryption password is required")
        self._key = derive_key(password, salt)

    def encrypt(self, plaintext: str) -> str:
        iv = os.urandom(IV_BYTES)
        enc = Cipher(algorithms.AES(self._key), modes.CTR(iv)).encryptor()
        ct = enc.update(plaintext.encode("utf-8")) + enc.finalize()
        return (iv + ct).hex()

    def decrypt(self, ciphertext_hex: str) -> str:
        try:
            raw = bytes.fromhex(ciphertext_hex)
        except (TypeError, ValueError):
            raise ValueError("ciphertext is not valid hex")
        if len(raw) < IV_BYTES:
            raise ValueError("ciphertext shorter than IV")
        iv, ct = raw[:IV_BYTES], raw[IV_BYTES:]
        dec = Cipher(algorithms.AES(self._key), modes.CTR(iv)).decryptor()
        return (dec.update(ct) + dec.finalize()).decode("utf-8")
