"""Tests for garmin_client.auth — mock-based, no real network calls."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from garmin_client.auth import (
    clear_tokens,
    create_session,
    has_tokens,
    is_authenticated,
    resume_session,
)
from garmin_client.exceptions import GarminAuthError, GarminMFARequired


@pytest.fixture
def tmp_token_dir(tmp_path):
    """Provide a temporary directory for token storage."""
    return tmp_path / "tokens"


def _seed_tokens(token_dir: Path) -> None:
    """Create a fake oauth1_token.json so auth code detects existing tokens."""
    token_dir.mkdir(parents=True, exist_ok=True)
    (token_dir / "oauth1_token.json").write_text("{}")


# ---------------------------------------------------------------------------
# resume_session
# ---------------------------------------------------------------------------


class TestResumeSession:
    def test_raises_when_no_tokens(self, tmp_token_dir):
        with pytest.raises(GarminAuthError, match="No saved tokens"):
            resume_session(tmp_token_dir)

    @patch("garmin_client.auth.Garmin")
    def test_resumes_with_tokens(self, MockGarmin, tmp_token_dir):
        _seed_tokens(tmp_token_dir)
        mock_instance = MagicMock()
        MockGarmin.return_value = mock_instance

        client = resume_session(tmp_token_dir)
        assert client is mock_instance
        mock_instance.login.assert_called_once_with(tokenstore=str(tmp_token_dir))

    @patch("garmin_client.auth.Garmin")
    def test_raises_on_load_failure(self, MockGarmin, tmp_token_dir):
        _seed_tokens(tmp_token_dir)
        mock_instance = MagicMock()
        mock_instance.login.side_effect = Exception("corrupt")
        MockGarmin.return_value = mock_instance

        with pytest.raises(GarminAuthError, match="Token resume failed"):
            resume_session(tmp_token_dir)


# ---------------------------------------------------------------------------
# create_session
# ---------------------------------------------------------------------------


class TestCreateSession:
    @patch("garmin_client.auth.Garmin")
    def test_resumes_from_tokens_when_present(self, MockGarmin, tmp_token_dir):
        _seed_tokens(tmp_token_dir)
        mock_instance = MagicMock()
        MockGarmin.return_value = mock_instance

        result = create_session("a@b.com", "pw", token_dir=tmp_token_dir)
        assert result is mock_instance
        # Token resume never sends credentials
        MockGarmin.assert_called_once_with()
        mock_instance.login.assert_called_once_with(tokenstore=str(tmp_token_dir))

    @patch("garmin_client.auth.Garmin")
    def test_falls_through_to_credentials_on_token_failure(self, MockGarmin, tmp_token_dir):
        _seed_tokens(tmp_token_dir)
        stale = MagicMock()
        stale.login.side_effect = Exception("expired tokens")
        fresh = MagicMock()
        MockGarmin.side_effect = [stale, fresh]

        result = create_session("a@b.com", "pw", token_dir=tmp_token_dir)
        assert result is fresh
        assert MockGarmin.call_count == 2
        fresh.login.assert_called_once_with()
        fresh.garth.dump.assert_called_once_with(str(tmp_token_dir))

    @patch("garmin_client.auth.Garmin")
    def test_login_without_tokens(self, MockGarmin, tmp_token_dir):
        mock_instance = MagicMock()
        MockGarmin.return_value = mock_instance

        result = create_session("a@b.com", "pw", token_dir=tmp_token_dir)
        assert result is mock_instance
        MockGarmin.assert_called_once_with(email="a@b.com", password="pw", prompt_mfa=None)
        mock_instance.garth.dump.assert_called_once_with(str(tmp_token_dir))

    @patch("garmin_client.auth.Garmin")
    def test_raises_on_bad_credentials(self, MockGarmin, tmp_token_dir):
        mock_instance = MagicMock()
        mock_instance.login.side_effect = Exception("Authentication failed: invalid credentials")
        MockGarmin.return_value = mock_instance

        with pytest.raises(GarminAuthError, match="Login failed"):
            create_session("a@b.com", "wrong", token_dir=tmp_token_dir)

    @patch("garmin_client.auth.Garmin")
    def test_mfa_challenge_without_prompt(self, MockGarmin, tmp_token_dir):
        mock_instance = MagicMock()
        mock_instance.login.side_effect = Exception("MFA verification required")
        MockGarmin.return_value = mock_instance

        with pytest.raises(GarminMFARequired):
            create_session("a@b.com", "pw", token_dir=tmp_token_dir)

    @patch("garmin_client.auth.Garmin")
    def test_prompt_mfa_is_forwarded(self, MockGarmin, tmp_token_dir):
        MockGarmin.return_value = MagicMock()

        mfa_cb = lambda: "123456"  # noqa: E731
        create_session("a@b.com", "pw", token_dir=tmp_token_dir, prompt_mfa=mfa_cb)

        MockGarmin.assert_called_once_with(email="a@b.com", password="pw", prompt_mfa=mfa_cb)

    @patch("garmin_client.auth.Garmin")
    def test_creates_token_dir(self, MockGarmin, tmp_token_dir):
        MockGarmin.return_value = MagicMock()

        assert not tmp_token_dir.exists()
        create_session("a@b.com", "pw", token_dir=tmp_token_dir)
        assert tmp_token_dir.exists()


# ---------------------------------------------------------------------------
# is_authenticated / clear_tokens
# ---------------------------------------------------------------------------


class TestTokenState:
    def test_not_authenticated_without_tokens(self, tmp_token_dir):
        assert not has_tokens(tmp_token_dir)
        assert not is_authenticated(tmp_token_dir)

    @patch("garmin_client.auth.Garmin")
    def test_authenticated_when_resume_works(self, MockGarmin, tmp_token_dir):
        _seed_tokens(tmp_token_dir)
        MockGarmin.return_value = MagicMock()
        assert is_authenticated(tmp_token_dir)

    @patch("garmin_client.auth.Garmin")
    def test_not_authenticated_when_resume_fails(self, MockGarmin, tmp_token_dir):
        _seed_tokens(tmp_token_dir)
        MockGarmin.return_value.login.side_effect = Exception("revoked")
        assert not is_authenticated(tmp_token_dir)

    def test_clear_tokens_revokes(self, tmp_token_dir):
        _seed_tokens(tmp_token_dir)
        clear_tokens(tmp_token_dir)
        assert not tmp_token_dir.exists()
        assert not has_tokens(tmp_token_dir)

    def test_clear_tokens_missing_dir(self, tmp_token_dir):
        clear_tokens(tmp_token_dir)
        assert not tmp_token_dir.exists()
