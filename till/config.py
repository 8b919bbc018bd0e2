import os
from typing import List

class Settings:
    def _split_csv(self, raw: str, *, default: List[str]) -> List[str]:
        parts = [p.strip() for p in (raw or "").split(",")]
        return [p for p in parts if p] or default

    def __init__(self) -> None:
        self.env = os.getenv("TILL_ENV", "local")
        # Single JSON file holding the catalog, history and open cart of this terminal.
        self.store_path = os.getenv("TILL_STORE_PATH", "").strip() or "till-store.json"
        self.cors_origins = self._split_csv(
            os.getenv("CORS_ORIGINS", "").strip(),
            default=["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:5173"],
        )
        self.api_version = os.getenv("APP_VERSION", "0.1.0").strip() or "0.1.0"

    @property
    def expose_errors(self) -> bool:
        return self.env in {"local", "dev"}

settings = Settings()
