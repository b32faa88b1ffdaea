from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, model_validator, field_validator
import secrets

BASE_DIR = Path(__file__).resolve().parent.parent  # backend/

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # ===== ENTORNO =====
    environment: str = Field(default="development")
    debug: bool = Field(default=False)

    # ===== SERVIDOR =====
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)

    # ===== DATABASE =====
    database_url: str = Field(default="sqlite:///./data/inventario.db")

    # ===== SECURITY =====
    secret_key: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    # Ventana durante la cual los permisos embebidos en el token siguen vigentes
    access_token_expire_minutes: int = Field(default=480)

    # ===== ADMIN (seed) =====
    admin_email: str = Field(default="admin@abasto.com")
    admin_password: str = Field(default="admin123")

    @field_validator("admin_email", "admin_password", mode="after")
    @classmethod
    def empty_to_default(cls, v: str, info) -> str:
        if v and v.strip():
            return v.strip()
        return "admin@abasto.com" if info.field_name == "admin_email" else "admin123"

    # ===== STORAGE / IMÁGENES =====
    max_upload_size_mb: int = Field(default=5)
    cloudinary_cloud_name: str | None = Field(default=None)
    cloudinary_api_key: str | None = Field(default=None)
    cloudinary_api_secret: str | None = Field(default=None)
    cloudinary_folder: str = Field(default="inventario/productos")

    # ===== CORS =====
    allowed_origins: str = Field(default="http://localhost:5173,http://localhost:3000")

    # ===== LOGS =====
    log_dir: str = Field(default="logs")

    @model_validator(mode="after")
    def validate_secret_key(self):
        if self.environment == "production" and len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY debe tener al menos 32 caracteres en producción.")
        return self

    @property
    def allowed_origins_list(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


settings = Settings()
