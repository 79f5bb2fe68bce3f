"""bldgreport configuration — data sources, report defaults, and service settings."""

from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings

DEFAULT_CONTACT_EMAIL = "Chelsea.Coppinger@socotec.us"
DEFAULT_CONTACT_PHONE = "+1 646 549 6045"


class Settings(BaseSettings):
    # Data sources
    data_path: str = "final_merged.xlsx"
    template_path: str = "newtemp.docx"

    @model_validator(mode="after")
    def _strip_paths(self) -> "Settings":
        """Strip whitespace/newlines from paths — common paste error in .env files."""
        for field in ("data_path", "template_path"):
            val = getattr(self, field)
            if val and val != val.strip():
                setattr(self, field, val.strip())
        return self

    # Report contents
    contact_email: str = DEFAULT_CONTACT_EMAIL
    contact_phone: str = DEFAULT_CONTACT_PHONE
    report_filename: str = "Compliance_Report.docx"
    strict_placeholders: bool = False

    # How a "FISP Filing Due" that is not a date is classified
    unparseable_due_policy: Literal["in_compliance", "non_compliant"] = "in_compliance"

    # Server
    host: str = "0.0.0.0"
    port: int = 5001

    # MLflow — local SQLite unless MLFLOW_TRACKING_URI is set
    mlflow_tracking_uri: str = "sqlite:///mlruns/mlflow.db"
    mlflow_experiment_name: str = "bldgreport"

    # Logging
    log_json: bool = True
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = ["*"]

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
