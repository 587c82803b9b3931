# keyrelay/clients/relay_client.py

import logging

import requests

from keyrelay.core.crypto import (
    Envelope,
    decrypt_message,
    encrypt_message,
    generate_key_pair,
    public_key_to_pem,
)

logger = logging.getLogger(__name__)

SERVER_URL = "http://127.0.0.1:3000"


class RelayClientError(Exception):
    def __init__(self, status_code: int, error: str):
        self.status_code = status_code
        self.error = error
        super().__init__(f"{status_code}: {error}")


class RelayClient:
    """Registers a key pair with a relay and exchanges encrypted messages through it.

    ``session`` can be anything with requests-style ``get``/``post``; tests
    pass FastAPI's ``TestClient``.
    """

    def __init__(self, username: str, server_url: str = SERVER_URL, session=None, private_key=None):
        self.username = username
        self.server_url = server_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.token = None
        self.public_keys = {}  # cache of recipients' PEMs

        if private_key is None:
            self.private_key, self.public_key_pem = generate_key_pair()
        else:
            self.private_key = private_key
            self.public_key_pem = public_key_to_pem(private_key)

    def _url(self, path: str) -> str:
        return f"{self.server_url}{path}"

    def _check(self, resp):
        if resp.status_code != 200:
            try:
                error = resp.json().get("error", resp.text)
            except ValueError:
                error = resp.text
            raise RelayClientError(resp.status_code, error)
        return resp.json()

    @property
    def _auth_headers(self):
        if self.token is None:
            raise RelayClientError(401, "not registered")
        return {"x-api-key": self.token}

    def register(self) -> str:
        """Register this client's public key; returns (and keeps) the API token."""
        data = self._check(self.session.post(
            self._url("/api/register"),
            json={"username": self.username, "publicKeyPem": self.public_key_pem},
        ))
        self.token = data["token"]
        logger.info("Registered %s", self.username)
        return self.token

    def get_public_key(self, username: str) -> str:
        if username not in self.public_keys:
            data = self._check(self.session.get(self._url(f"/api/publicKey/{username}")))
            self.public_keys[username] = data["publicKeyPem"]
        return self.public_keys[username]

    def list_users(self):
        return self._check(self.session.get(self._url("/api/users")))["users"]

    def send_message(self, recipient: str, message: str):
        """Encrypt ``message`` for ``recipient`` and post it to the relay."""
        envelope = encrypt_message(self.get_public_key(recipient), message.encode("utf-8"))
        return self._check(self.session.post(
            self._url("/api/send"),
            json={
                "from": self.username,
                "to": recipient,
                "ciphertext": envelope.ciphertext,
                "encryptedKey": envelope.encrypted_key,
                "iv": envelope.iv,
            },
            headers=self._auth_headers,
        ))

    def fetch_messages(self):
        """Fetch and decrypt every message addressed to this client, oldest first."""
        data = self._check(self.session.get(
            self._url(f"/api/messages/{self.username}"),
            headers=self._auth_headers,
        ))

        decrypted = []
        for msg in data["messages"]:
            envelope = Envelope(msg["ciphertext"], msg["encryptedKey"], msg["iv"])
            plaintext = decrypt_message(self.private_key, envelope)
            decrypted.append({
                "from": msg["from"],
                "message": plaintext.decode("utf-8"),
                "timestamp": msg["timestamp"],
            })
        return decrypted
