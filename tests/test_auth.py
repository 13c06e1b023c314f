"""Tests for the login check."""

from closedjobs.auth import Credentials, StaticCredentialAuthenticator


class TestStaticCredentialAuthenticator:

    def test_accepts_configured_pair(self):
        auth = StaticCredentialAuthenticator("clerk", "s3cret")
        assert auth.authenticate(Credentials("clerk", "s3cret")) is True

    def test_rejects_wrong_password(self):
        auth = StaticCredentialAuthenticator("clerk", "s3cret")
        assert auth.authenticate(Credentials("clerk", "nope")) is False

    def test_rejects_wrong_username(self):
        auth = StaticCredentialAuthenticator("clerk", "s3cret")
        assert auth.authenticate(Credentials("admin", "s3cret")) is False

    def test_unconfigured_rejects_everyone(self):
        auth = StaticCredentialAuthenticator(None, None)
        assert auth.authenticate(Credentials("", "")) is False

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("CLOSEDJOBS_USERNAME", "clerk")
        monkeypatch.setenv("CLOSEDJOBS_PASSWORD", "pässword")

        auth = StaticCredentialAuthenticator.from_env()

        assert auth.authenticate(Credentials("clerk", "pässword")) is True
