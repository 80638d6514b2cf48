"""Application configuration."""

from os import getenv

from pydantic import BaseModel


class Settings(BaseModel):
    """Runtime settings for the application."""

    app_name: str = "Canteen Ordering API"
    app_env: str = getenv("APP_ENV", "dev")
    debug: bool = getenv("DEBUG", "0") == "1"
    database_url: str = getenv("DATABASE_URL", "sqlite:///./canteen.db")
    jwt_secret_key: str = getenv("JWT_SECRET_KEY", "dev-only-change-me-to-a-long-random-secret")
    jwt_algorithm: str = getenv("JWT_ALGORITHM", "HS256")
    jwt_expire_minutes: int = int(getenv("JWT_EXPIRE_MINUTES", "60"))
    staff_user: str = getenv("STAFF_USER", "")
    staff_pass: str = getenv("STAFF_PASS", "")
    menu_price_min: int = int(getenv("MENU_PRICE_MIN", "50"))
    menu_price_max: int = int(getenv("MENU_PRICE_MAX", "100"))
    canteen_timezone: str = getenv("CANTEEN_TIMEZONE", "Asia/Kolkata")
    estimator_base_url: str = getenv("ESTIMATOR_BASE_URL", "")
    estimator_api_key: str = getenv("ESTIMATOR_API_KEY", "")
    estimator_model: str = getenv("ESTIMATOR_MODEL", "google/gemini-3-flash-preview")
    estimator_timeout_seconds: float = float(getenv("ESTIMATOR_TIMEOUT_SECONDS", "3.0"))
    upi_payee_address: str = getenv("UPI_PAYEE_ADDRESS", "canteen@upi")
    upi_payee_name: str = getenv("UPI_PAYEE_NAME", "College Canteen")
    upi_currency: str = getenv("UPI_CURRENCY", "INR")


settings: Settings = Settings()
