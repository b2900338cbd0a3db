from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables"""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )
    
    # Backend
    api_base_url: str = "http://localhost:5292/api"
    use_mocks: bool = False  # serve canned data when the backend is unreachable
    
    # Auth
    api_token: Optional[str] = None
    
    # Navigation
    post_submit_path: str = "/approvals?tab=initiated"
    
    # App
    debug: bool = False


settings = Settings()
