"""
PIN Credential Module

Pluggable PIN storage. Accounts never keep the PIN itself, only what the
configured hasher derives from it, and comparisons are constant-time.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
import hashlib
import hmac
import secrets


@dataclass(frozen=True)
class PinCredential:
    """Stored form of a PIN"""
    scheme: str
    salt: str
    digest: str


class PinHasher(ABC):
    """Abstract PIN hashing scheme"""

    scheme = "abstract"

    @abstractmethod
    def _digest(self, pin: str, salt: str) -> str:
        """Derive the stored digest for a PIN"""
        pass

    def _generate_salt(self) -> str:
        return secrets.token_hex(16)

    def create(self, pin: str) -> PinCredential:
        """Build a credential for a new PIN"""
        salt = self._generate_salt()
        return PinCredential(scheme=self.scheme, salt=salt, digest=self._digest(pin, salt))

    def verify(self, credential: PinCredential, pin: str) -> bool:
        """Check a PIN against a stored credential"""
        if credential.scheme != self.scheme:
            return False
        expected = self._digest(pin, credential.salt)
        return hmac.compare_digest(expected.encode(), credential.digest.encode())


class ScryptPinHasher(PinHasher):
    """Salted scrypt digests"""

    scheme = "scrypt"

    def __init__(self, n: int = 16384, r: int = 8, p: int = 1):
        self.n = n
        self.r = r
        self.p = p

    def _digest(self, pin: str, salt: str) -> str:
        return hashlib.scrypt(
            pin.encode(),
            salt=salt.encode(),
            n=self.n, r=self.r, p=self.p
        ).hex()


class PlaintextPinHasher(PinHasher):
    """Stores the PIN as-is (demo terminals only)"""

    scheme = "plaintext"

    def _generate_salt(self) -> str:
        return ""

    def _digest(self, pin: str, salt: str) -> str:
        return pin


def get_pin_hasher(scheme: str) -> PinHasher:
    """Resolve a hasher by scheme name"""
    if scheme == ScryptPinHasher.scheme:
        return ScryptPinHasher()
    if scheme == PlaintextPinHasher.scheme:
        return PlaintextPinHasher()
    raise ValueError(f"Unknown PIN hash scheme: {scheme}")
