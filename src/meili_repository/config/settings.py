"""Connection and behaviour settings for Meilisearch repositories.

Environment Variables:
    MEILI_URL: Meilisearch endpoint URL (default: http://localhost:7700)
    MEILI_API_KEY: API key sent as bearer token (default: none)
    MEILI_SYNCHRONOUS: Wait for every mutation task, true/false (default: true)
    MEILI_CHUNK_SIZE: Documents per write request (default: 1000)
    MEILI_TASK_TIMEOUT_MS: Max wait for a task to finish (default: 180000)
    MEILI_POLL_INTERVAL_MS: Delay between task status checks (default: 500)
    MEILI_REQUEST_TIMEOUT_S: HTTP request timeout in seconds (default: 300)
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

PRIMARY_KEY = "id"
DOCUMENTS_LIMIT = 100000


class MeiliSettings(BaseModel):
    """Settings shared by the client, the task coordinator and repositories."""

    model_config = {"frozen": True}

    url: str = "http://localhost:7700"
    api_key: Optional[str] = None
    synchronous: bool = True
    chunk_size: int = Field(default=1000, ge=1)
    primary_key: str = PRIMARY_KEY
    task_timeout_ms: int = Field(default=180000, gt=0)
    poll_interval_ms: int = Field(default=500, gt=0)
    request_timeout_s: float = Field(default=300.0, gt=0)
    documents_limit: int = Field(default=DOCUMENTS_LIMIT, ge=1)

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "MeiliSettings":
        """Build settings from environment variables.

        Args:
            env_file: Optional .env file loaded before reading the environment.
                Variables already set in the environment win.

        Raises:
            pydantic.ValidationError: If a value is out of range or malformed
        """
        if env_file:
            load_dotenv(env_file)

        return cls(
            url=os.getenv("MEILI_URL", "http://localhost:7700"),
            api_key=os.getenv("MEILI_API_KEY") or None,
            synchronous=os.getenv("MEILI_SYNCHRONOUS", "true"),
            chunk_size=os.getenv("MEILI_CHUNK_SIZE", "1000"),
            task_timeout_ms=os.getenv("MEILI_TASK_TIMEOUT_MS", "180000"),
            poll_interval_ms=os.getenv("MEILI_POLL_INTERVAL_MS", "500"),
            request_timeout_s=os.getenv("MEILI_REQUEST_TIMEOUT_S", "300"),
        )
