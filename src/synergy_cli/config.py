import os
from typing import Optional

import yaml
from pydantic import BaseModel

HOME_DIR = os.path.expanduser("~") or os.environ.get("HOME") or os.environ.get("USERPROFILE")
SYNERGY_DIR = os.path.join(HOME_DIR, ".synergy")
PROFILE_FILE = "profile.yaml"


class CLIProfile(BaseModel):
    api_url: str
    token: str
    email: Optional[str] = None
    user_id: Optional[str] = None
    username: Optional[str] = None

    @property
    def base_url(self) -> str:
        """API url without a trailing ``/api`` segment."""
        url = self.api_url.rstrip("/")
        if url.endswith("/api"):
            url = url[:-4]
        return url


def profile_path(path: Optional[str] = None) -> str:
    return path or os.path.join(SYNERGY_DIR, PROFILE_FILE)


def read_profile(path: Optional[str] = None) -> Optional[CLIProfile]:
    filename = profile_path(path)

    if not os.path.exists(filename):
        return None

    with open(filename, "r") as file:
        data = yaml.safe_load(file)

    if not data:
        return None
    return CLIProfile(**data)


def write_profile(profile: CLIProfile, path: Optional[str] = None) -> str:
    filename = profile_path(path)
    os.makedirs(os.path.dirname(filename), exist_ok=True)

    with open(filename, "w") as file:
        file.write(yaml.safe_dump(profile.model_dump(exclude_none=True)))

    return filename
