"""Login check in front of the job list."""

import hmac
import os
from abc import ABC, abstractmethod
from typing import NamedTuple, Optional


class Credentials(NamedTuple):
    username: str
    password: str


class Authenticator(ABC):
    """Decides whether a pair of credentials may open the job list."""

    @abstractmethod
    def authenticate(self, credentials: Credentials) -> bool:
        """True if the credentials are accepted."""


class StaticCredentialAuthenticator(Authenticator):
    """
    Accepts exactly one configured username/password pair.

    With no pair configured every login is rejected.
    """

    def __init__(self, username: Optional[str], password: Optional[str]):
        self.username = username
        self.password = password

    @classmethod
    def from_env(cls) -> "StaticCredentialAuthenticator":
        return cls(os.getenv("CLOSEDJOBS_USERNAME"), os.getenv("CLOSEDJOBS_PASSWORD"))

    def authenticate(self, credentials: Credentials) -> bool:
        if not self.username or not self.password:
            return False
        user_ok = hmac.compare_digest(credentials.username.encode("utf-8"), self.username.encode("utf-8"))
        password_ok = hmac.compare_digest(credentials.password.encode("utf-8"), self.password.encode("utf-8"))
        return user_ok and password_ok
