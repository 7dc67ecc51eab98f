"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, mlm.toml only contains overrides.
A local checkout needs no config at all (SQLite file ``mlm.db``).
"""

from __future__ import annotations

from pydantic import BaseModel
from sqlalchemy.engine import URL


class DatabaseConfig(BaseModel):
    """[database] section.

    ``url`` wins when set; otherwise the URL is assembled from the
    remaining fields (``path`` for SQLite, host/port/user/... for servers).
    """

    model_config = {"frozen": True}

    driver: str = "sqlite"
    path: str = "mlm.db"
    host: str = "127.0.0.1"
    port: int = 3306
    user: str = "user"
    password: str = "password"
    name: str = "mlm"
    url: str | None = None

    def sqlalchemy_url(self) -> str:
        """Return the SQLAlchemy URL string for this configuration."""
        if self.url:
            return self.url
        if self.driver.startswith("sqlite"):
            return f"{self.driver}:///{self.path}"
        return URL.create(
            self.driver,
            username=self.user,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.name,
        ).render_as_string(hide_password=False)


class ServerConfig(BaseModel):
    """[server] section."""

    model_config = {"frozen": True}

    host: str = "0.0.0.0"
    port: int = 8080
