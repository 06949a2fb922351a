"""
Client-local "who am I": the acting user's Profile in a JSON file. Never synced to the server;
clearing it signs this client out and leaves the shared roster and calendar untouched.
"""
import json
import logging
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from whentomeet.config import settings
from whentomeet.services.types import Profile

logger = logging.getLogger(__name__)


class LocalIdentity:
    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path else settings.whentomeet_identity_path

    def load(self) -> Profile | None:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        try:
            return Profile.model_validate(json.loads(raw))
        except (json.JSONDecodeError, PydanticValidationError):
            logger.warning("Ignoring unreadable identity file %s", self.path)
            return None

    def save(self, profile: Profile) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(profile.to_json()), encoding="utf-8")

    def sign_out(self) -> None:
        self.path.unlink(missing_ok=True)
