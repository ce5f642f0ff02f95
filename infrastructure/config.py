import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv


DEFAULT_DB_PATH = "training.db"
DEFAULT_USER_ID = "local"


@dataclass(frozen=True)
class AppConfig:
    db_path: str = DEFAULT_DB_PATH
    user_id: str = DEFAULT_USER_ID
    backend_url: Optional[str] = None
    backend_api_key: Optional[str] = None
    backend_access_token: Optional[str] = None
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @property
    def use_backend(self) -> bool:
        return bool(self.backend_url)


def load_config(env: Optional[Mapping[str, str]] = None) -> AppConfig:
    """
    Read configuration from the environment.

    A .env file in the working directory is loaded first when no
    explicit mapping is given.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    backend_url = env.get("BACKEND_URL") or None
    if backend_url:
        backend_url = backend_url.rstrip("/")

    return AppConfig(
        db_path=env.get("TRAINING_DB_PATH") or DEFAULT_DB_PATH,
        user_id=env.get("TRAINING_USER_ID") or DEFAULT_USER_ID,
        backend_url=backend_url,
        backend_api_key=env.get("BACKEND_API_KEY") or None,
        backend_access_token=env.get("BACKEND_ACCESS_TOKEN") or None,
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        log_file=env.get("LOG_FILE") or None,
    )
