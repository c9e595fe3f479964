from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from day_planner.config.settings import SECRETS_DIR
from day_planner.errors import MissingCredentialsError

# Read-only access is all the planner needs.
SCOPES = [
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/calendar.readonly",
]


@dataclass(frozen=True)
class GoogleAuthConfig:
    # Path to OAuth client credentials downloaded from Google Cloud Console.
    credentials_path: Path
    # Token cache will be created here after first login.
    token_path: Path


def default_auth_config() -> GoogleAuthConfig:
    return GoogleAuthConfig(
        credentials_path=SECRETS_DIR / "credentials.json",
        token_path=SECRETS_DIR / "google_token.json",
    )


def credentials_from_token(access_token: str) -> Credentials:
    """Wrap a bearer token obtained elsewhere (e.g. by a web login)."""
    if not access_token:
        raise MissingCredentialsError("No Google access token supplied.")
    return Credentials(token=access_token)


def load_local_credentials(cfg: GoogleAuthConfig) -> Credentials:
    """Load cached credentials, refreshing or running the browser flow if needed."""
    creds = None

    if cfg.token_path.exists():
        creds = Credentials.from_authorized_user_file(str(cfg.token_path), SCOPES)

    # If there are no (valid) credentials available, let the user log in.
    if not creds or not creds.valid:
        if creds and creds.expired and creds.refresh_token:
            creds.refresh(Request())
        else:
            if not cfg.credentials_path.exists():
                raise MissingCredentialsError(
                    f"Missing Google credentials at {cfg.credentials_path}. "
                    "Did you configure DAY_PLANNER_SECRETS_DIR?"
                )
            flow = InstalledAppFlow.from_client_secrets_file(
                str(cfg.credentials_path),
                SCOPES,
            )
            creds = flow.run_local_server(port=0)

        # Save the credentials for the next run.
        cfg.token_path.parent.mkdir(parents=True, exist_ok=True)
        cfg.token_path.write_text(creds.to_json(), encoding="utf-8")

    return creds
