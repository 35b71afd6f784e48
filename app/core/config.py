import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


class Settings:
    SERVICE_NAME: str = os.getenv("SERVICE_NAME", "Facility Rentals Pricing Service")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    DEFAULT_CURRENCY_SYMBOL: str = os.getenv("DEFAULT_CURRENCY_SYMBOL", "₵")
    DEFAULT_TAX_INCLUSIVE: bool = _env_flag("DEFAULT_TAX_INCLUSIVE")
    DEFAULT_TAX_ON_TAX: bool = _env_flag("DEFAULT_TAX_ON_TAX")

    DEFAULT_INVOICE_PREFIX: str = os.getenv("DEFAULT_INVOICE_PREFIX", "INV")
    PAYSTACK_INVOICE_PREFIX: str = os.getenv("PAYSTACK_INVOICE_PREFIX", "PS")
    try:
        DEFAULT_INVOICE_PADDING: int = int(os.getenv("DEFAULT_INVOICE_PADDING", "4"))
    except ValueError:
        DEFAULT_INVOICE_PADDING = 4
    INVOICE_MIN_YEAR: int = int(os.getenv("INVOICE_MIN_YEAR", "2000"))
    INVOICE_MAX_YEAR: int = int(os.getenv("INVOICE_MAX_YEAR", "2100"))


settings = Settings()
