import os



def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int(value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    return int(value)


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if value is None:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CORS_ALLOWED_ORIGINS = _get_list(os.getenv("CORS_ALLOWED_ORIGINS"), ["http://localhost:5173"])

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "60"))

# Slot shape limits, matching the doctor availability form.
MIN_SLOT_DURATION_MINUTES = _get_int(os.getenv("MIN_SLOT_DURATION_MINUTES"), 15)
MAX_SLOT_DURATION_MINUTES = _get_int(os.getenv("MAX_SLOT_DURATION_MINUTES"), 180)

# Rejecting overlapping slots for the same doctor is opt-in.
SLOT_OVERLAP_CHECK = _get_bool(os.getenv("SLOT_OVERLAP_CHECK"), default=False)

# New bookings start as confirmed instead of pending.
AUTO_CONFIRM_BOOKINGS = _get_bool(os.getenv("AUTO_CONFIRM_BOOKINGS"), default=False)

SLOT_LOCK_TIMEOUT_SECONDS = float(os.getenv("SLOT_LOCK_TIMEOUT_SECONDS", "5"))

MAX_APPOINTMENT_REASON_LENGTH = _get_int(os.getenv("MAX_APPOINTMENT_REASON_LENGTH"), 600)

def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    if MIN_SLOT_DURATION_MINUTES < 5:
        raise RuntimeError("MIN_SLOT_DURATION_MINUTES must be at least 5.")
    if MAX_SLOT_DURATION_MINUTES < MIN_SLOT_DURATION_MINUTES:
        raise RuntimeError("MAX_SLOT_DURATION_MINUTES must not be below MIN_SLOT_DURATION_MINUTES.")
