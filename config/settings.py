from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Solana RPC (network-read collaborator)
    solana_rpc_url: str = "https://api.devnet.solana.com"
    rpc_commitment: str = "confirmed"
    rpc_timeout_sec: float = 10.0
    rpc_max_rps: float = 10.0  # public devnet tolerates ~10 RPS per IP

    # Token ACL: holds the mint freeze authority and gates thaw/freeze
    token_acl_program_id: str = "81H44JYqk1p8RUks7pNJjhQG4Pj8FcaJeTUxZKN3JfLc"

    # Allow/Block list program (gating program plugged into Token ACL)
    list_program_id: str = "8hNxmWetsVptuZ5LGYC6fM4xTpoUfPijz3NyYctyM79N"

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False


settings = Settings()
