from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    app_name: str = "Task Tracker"
    debug: bool = False
    log_level: str = "INFO"

    # Redis
    redis_url: str = "redis://localhost:6379/0"
    redis_pool_size: int = 10

    # Listing
    default_page_size: int = 100

    # Frontend
    frontend_url: str = "http://localhost:3000"

    model_config = {
        "env_file": ".env",
        "extra": "ignore",
    }


settings = Settings()
