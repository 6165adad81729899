"""
Library defaults, read from the environment (prefix ``SCHEMQL_``).

These only seed new ``SchemQl`` instances; every instance keeps its own copy,
so changing ``settings`` later does not affect instances already built.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SCHEMQL_",
        env_ignore_empty=True,
        extra="ignore",
    )

    # JSON-encode dict/list param values before they reach the driver
    STRINGIFY_OBJECT_PARAMS: bool = False
    # Emit table names double-quoted in {table: [columns]} placeholders
    QUOTE_SQL_IDENTIFIERS: bool = False
    # Adapter SQL logging: 0 = off, 1 = executed SQL, 2 = prepared + executed
    LOG_SQL_VERBOSITY: int = 0


settings = Settings()
