# keyrelay/core/crypto.py
#
# Client-side envelope encryption. The relay itself never calls into this
# module: it only stores the three base64 fields produced here.

import base64
import os
from typing import NamedTuple, Tuple

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

RSA_KEY_SIZE = 2048
AES_KEY_BITS = 256
IV_SIZE = 12

_OAEP = padding.OAEP(
    mgf=padding.MGF1(algorithm=hashes.SHA256()),
    algorithm=hashes.SHA256(),
    label=None,
)


class Envelope(NamedTuple):
    ciphertext: str
    encrypted_key: str
    iv: str


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


# ---------- KEYS ----------

def generate_key_pair() -> Tuple[rsa.RSAPrivateKey, str]:
    """
    RSA key pair → (private key, SubjectPublicKeyInfo PEM)
    """
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=RSA_KEY_SIZE)
    return private_key, public_key_to_pem(private_key)


def public_key_to_pem(private_key: rsa.RSAPrivateKey) -> str:
    return private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("ascii")


# ---------- ENCRYPTION ----------

def encrypt_message(public_key_pem: str, plaintext: bytes) -> Envelope:
    """
    AES-256-GCM over the plaintext, AES key wrapped with RSA-OAEP
    """
    public_key = serialization.load_pem_public_key(public_key_pem.encode("ascii"))

    key = AESGCM.generate_key(bit_length=AES_KEY_BITS)
    iv = os.urandom(IV_SIZE)
    ciphertext = AESGCM(key).encrypt(iv, plaintext, None)

    return Envelope(
        ciphertext=_b64(ciphertext),
        encrypted_key=_b64(public_key.encrypt(key, _OAEP)),
        iv=_b64(iv),
    )


def decrypt_message(private_key: rsa.RSAPrivateKey, envelope: Envelope) -> bytes:
    key = private_key.decrypt(base64.b64decode(envelope.encrypted_key), _OAEP)
    return AESGCM(key).decrypt(
        base64.b64decode(envelope.iv),
        base64.b64decode(envelope.ciphertext),
        None,
    )
