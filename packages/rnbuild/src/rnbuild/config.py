"""Environment-based configuration for rnbuild."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """rnbuild configuration.

    All settings can be overridden via environment variables with
    RNBUILD_ prefix. For example:
        RNBUILD_LIVE_ROWS=20
        RNBUILD_CRATE=bindings
    """

    # Live output window
    live_rows: int = 10
    chunk_width: int = 120
    min_chunk_width: int = 20
    fallback_width: int = 120  # used when stderr is not a terminal
    drain_grace: float = 1.0  # seconds to wait for pipe EOF after the child exits

    # Project layout
    rust_dir: str = "rust"
    crate: str = "metrics"

    model_config = {"env_prefix": "RNBUILD_"}


settings = Settings()
