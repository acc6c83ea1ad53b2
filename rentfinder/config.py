from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    api_base_url: str = "http://localhost:3001/api"
    api_timeout_seconds: float = 30.0
    upload_timeout_seconds: float = 60.0

    listings_page_size: int = 12
    search_debounce_seconds: float = 0.3
    carousel_interval_seconds: float = 3.0
    similar_max_results: int = 6

    notice_seconds: float = 5.0
    error_notice_seconds: float = 10.0

    placeholder_image_url: str = "/static/property_img.svg"
    popular_locations: list[str] = ["Hitech city", "Madhapur", "Gachibowli", "Kondapur"]
    max_form_drafts: int = 100

    log_level: str = "INFO"

    class Config:
        env_file = ".env"


settings = Settings()
