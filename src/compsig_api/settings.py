from __future__ import annotations
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    signing_key_path: str = Field(
        default="./keys/secp256k1_private.key", alias="COMPSIG_SIGNING_KEY_PATH"
    )
    allow_dev_keygen: bool = Field(default=False, alias="COMPSIG_ALLOW_DEV_KEYGEN")

    # Upper bound on messages per composite signature
    max_messages: int = Field(default=64, alias="COMPSIG_MAX_MESSAGES")

    # Global request size limit enforced by middleware (bytes)
    max_request_bytes: int = Field(default=262144, alias="COMPSIG_MAX_REQUEST_BYTES")

    default_encoding: str = Field(default="jcs", alias="COMPSIG_DEFAULT_ENCODING")

    log_level: str = Field(default="INFO", alias="COMPSIG_LOG_LEVEL")

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()  # load at import
