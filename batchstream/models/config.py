"""
Pydantic model for the HTTP transport configuration.
Provides robust validation for all settings.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from batchstream import __version__

MIN_CHUNK_SIZE = 1024  # 1 KB
MAX_CHUNK_SIZE = 4194304  # 4 MB
DEFAULT_CHUNK_SIZE = 131072  # 128 KB


class TransportConfig(BaseModel):
    """A validated configuration model for HTTP transfers."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    chunk_size: int = DEFAULT_CHUNK_SIZE
    connect_timeout: float = 15.0
    read_timeout: float = 90.0
    total_timeout: float | None = None
    max_redirects: int = 10
    user_agent: str = f"batchstream/{__version__}"

    # Internal field not loaded from INI file
    config_path: str = Field("", repr=False)

    @field_validator("chunk_size")
    @classmethod
    def validate_chunk_size(cls, v: int) -> int:
        """Keeps chunks between 1 KB and 4 MB."""
        if v < MIN_CHUNK_SIZE or v > MAX_CHUNK_SIZE:
            raise ValueError(
                f"Chunk size must be between {MIN_CHUNK_SIZE} and {MAX_CHUNK_SIZE} bytes."
            )
        return v

    @field_validator("connect_timeout", "read_timeout")
    @classmethod
    def validate_timeouts(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeouts must be positive.")
        return v

    @field_validator("max_redirects")
    @classmethod
    def validate_redirects(cls, v: int) -> int:
        if v < 1 or v > 50:
            raise ValueError("Max redirects must be between 1 and 50.")
        return v

    @field_validator("user_agent")
    @classmethod
    def validate_user_agent(cls, v: str) -> str:
        if not v:
            raise ValueError("User agent cannot be empty.")
        return v

    @model_validator(mode="after")
    def validate_total_timeout(self) -> "TransportConfig":
        """A total timeout shorter than the connect timeout can never succeed."""
        if self.total_timeout is not None and self.total_timeout < self.connect_timeout:
            raise ValueError(
                "Total timeout cannot be shorter than the connect timeout."
            )
        return self

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
