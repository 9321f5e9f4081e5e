import os


class Settings:
    def __init__(self):
        self.app_name = "Integrador Billing"
        self.api_version = "1.0.0"
        self.environment = os.getenv("BILLING_ENVIRONMENT", "development")
        self.database_url = os.getenv("DATABASE_URL", "sqlite:///./billing.db")
        self.log_level = os.getenv("BILLING_LOG_LEVEL", "INFO")
        # Tax condition of the issuing company; drives invoice type A/B/C.
        self.issuer_tax_condition = os.getenv("BILLING_ISSUER_TAX_CONDITION", "REGISTERED")
        self.invoice_due_days = int(os.getenv("BILLING_DUE_DAYS", "10"))
        self.invoice_series = {"A": 1, "B": 2, "C": 3}


_settings_instance = None


def get_settings():
    """Return a singleton Settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
