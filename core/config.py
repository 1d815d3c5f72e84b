"""Project-wide configuration using dynaconf."""

import os
from pathlib import Path

from dynaconf import Dynaconf

_root = Path(os.environ.get("APP_ROOT_PATH", "."))

settings = Dynaconf(
    envvar_prefix="APP",
    root_path=_root,
    settings_files=["settings.toml", ".secrets.toml"],
    environments=True,
    load_dotenv=True,
    default_env="development",
    # HTTP server
    server_host="0.0.0.0",
    server_port=5000,
    upload_dir="uploads",
    # Transcript store
    store_backend="memory",
    store_ttl_seconds=86400,
    database_url="sqlite:///transcripts.db",
    # Redis
    cache_redis_url="redis://localhost:6379/0",
    cache_ttl_seconds=3600,
    rate_limit_window_seconds=1,
    # STT
    stt_backend="openai",
    stt_model="whisper-1",
    stt_language_code=None,
    stt_assemblyai_speech_model="universal-2",
    stt_rate_limit_requests=5,
    stt_max_retries=3,
    stt_retry_delay_seconds=2.0,
    stt_retry_backoff_multiplier=2.0,
    # Word QC
    qc_similarity_threshold=80,
    qc_segment_temperature=0.1,
    qc_max_workers=1,
    qc_temp_dir=None,
)


def get_credential(name: str) -> str | None:
    """Look up an API credential, preferring APP_-prefixed settings over the bare env var."""
    value = settings.get(name.lower())
    if value:
        return str(value)
    return os.environ.get(name.upper()) or None
