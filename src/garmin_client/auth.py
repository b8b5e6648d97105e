"""Garmin Connect session management.

A session is authorized when the garth tokens saved under ``token_dir``
can be resumed. Logging in with credentials is a one-off step that
writes those tokens.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Callable, Optional

from garminconnect import Garmin

from garmin_client.exceptions import GarminAuthError, GarminMFARequired

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_DIR = Path("~/.garminconnect").expanduser()
_TOKEN_FILE = "oauth1_token.json"


def has_tokens(token_dir: Path | str = DEFAULT_TOKEN_DIR) -> bool:
    return (Path(token_dir) / _TOKEN_FILE).exists()


def create_session(
    email: str,
    password: str,
    token_dir: Path | str = DEFAULT_TOKEN_DIR,
    prompt_mfa: Optional[Callable[[], str]] = None,
) -> Garmin:
    """Log in to Garmin Connect and persist the session tokens.

    Saved tokens are tried first; credentials are only sent when they are
    missing or no longer accepted.

    Parameters
    ----------
    email, password : str
        Garmin Connect account credentials.
    token_dir : Path | str
        Directory where garth tokens are persisted.
    prompt_mfa : callable, optional
        Returns the verification code when Garmin asks for one. Without it
        an MFA challenge raises ``GarminMFARequired``.
    """
    token_dir = Path(token_dir)
    token_dir.mkdir(parents=True, exist_ok=True)
    tokenstore = str(token_dir)

    if has_tokens(token_dir):
        try:
            return resume_session(token_dir)
        except GarminAuthError:
            logger.info("Saved tokens rejected, logging in with credentials")

    try:
        client = Garmin(email=email, password=password, prompt_mfa=prompt_mfa)
        client.login()
        client.garth.dump(tokenstore)
    except Exception as exc:
        message = str(exc).lower()
        if prompt_mfa is None and ("mfa" in message or "verification" in message):
            raise GarminMFARequired(str(exc)) from exc
        raise GarminAuthError(f"Login failed: {exc}") from exc

    logger.info("Logged in and saved tokens to %s", token_dir)
    return client


def resume_session(token_dir: Path | str = DEFAULT_TOKEN_DIR) -> Garmin:
    """Resume from saved tokens; raises ``GarminAuthError`` when that fails."""
    token_dir = Path(token_dir)
    if not has_tokens(token_dir):
        raise GarminAuthError(f"No saved tokens at {token_dir}")

    try:
        client = Garmin()
        client.login(tokenstore=str(token_dir))
    except Exception as exc:
        raise GarminAuthError(f"Token resume failed: {exc}") from exc
    logger.debug("Resumed session from %s", token_dir)
    return client


def is_authenticated(token_dir: Path | str = DEFAULT_TOKEN_DIR) -> bool:
    """True if the tokens at *token_dir* still resume a session."""
    try:
        resume_session(token_dir)
    except GarminAuthError:
        return False
    return True


def clear_tokens(token_dir: Path | str = DEFAULT_TOKEN_DIR) -> None:
    """Delete saved tokens, revoking the engine's access."""
    token_dir = Path(token_dir)
    if token_dir.exists():
        shutil.rmtree(token_dir)
        logger.info("Cleared tokens at %s", token_dir)
