import os


class Settings:
    def __init__(self):
        self.app_name = "Slimbooks"
        self.api_version = "1.0.0"
        self.environment = os.getenv("ENVIRONMENT", "development")
        self.database_url = os.getenv("DATABASE_URL", "sqlite:///./slimbooks.db")
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        # Invoice numbers are rendered as f"{prefix}-{n:04d}"
        self.invoice_number_prefix = os.getenv("INVOICE_NUMBER_PREFIX", "INV")


_settings_instance = None


def get_settings():
    """Return a singleton Settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
