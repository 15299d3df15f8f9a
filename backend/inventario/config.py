from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator

BASE_DIR = Path(__file__).resolve().parent.parent  # backend/

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # ===== ENTORNO =====
    environment: str = Field(default="development")
    debug: bool = Field(default=False)

    # ===== DATABASE =====
    database_url: str = Field(default="sqlite:///./data/inventario.db")
    # Timeout por llamada (conexión / sentencia). Las mutaciones de stock no se reintentan.
    db_timeout_seconds: int = Field(default=10)

    # ===== INVENTARIO =====
    ventana_recientes_dias: int = Field(default=30)
    limite_movimientos_dashboard: int = Field(default=5)
    limite_top_productos: int = Field(default=5)

    # ===== LOGGING =====
    log_dir: str = Field(default="logs")
    log_level: str = Field(default="INFO")

    # ===== CORS =====
    allowed_origins: str = Field(default="http://localhost:5173,http://localhost:3000")

    @field_validator("db_timeout_seconds", "ventana_recientes_dias", "limite_movimientos_dashboard", "limite_top_productos")
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("debe ser mayor que 0")
        return v

    @field_validator("log_level", mode="after")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        return v.strip().upper() if v and v.strip() else "INFO"

    @property
    def allowed_origins_list(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


settings = Settings()
