"""SAP connection configuration.

Reads settings from environment variables (optionally from a .env file in the
project root):
- SAP_BASE_URL: Base URL of the SAP gateway (e.g., "https://sap.example.com/sap/opu/odata/sap")
- SAP_USER / SAP_PASSWORD: Basic auth credentials (optional)
- SAP_CLIENT: SAP client number sent as the sap-client header (default "100")
- SAP_TIMEOUT_SECONDS: Total request timeout (default 30)
- SAP_INPUT_PATH: Input descriptor file
- LOG_LEVEL / LOG_JSON: Logging setup
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_INPUT_PATH = "Inputs/SDC_Profit_Center_Profit_Center_Name_sample.json"

_env_path = Path(__file__).resolve().parent.parent / ".env"


def _as_bool(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass
class SAPConfig:
    """Configuration for SAP API access.

    Attributes:
        base_url_raw: Gateway base URL as configured
        user: Basic auth user name
        password: Basic auth password
        sap_client: SAP client number
        timeout_seconds: Total timeout per request
        input_path: Path to the input descriptor file
        log_level: Logging level name
        log_json: Emit JSON log lines instead of human-readable ones
    """
    base_url_raw: str
    user: Optional[str] = None
    password: Optional[str] = None
    sap_client: str = "100"
    timeout_seconds: float = 30.0
    input_path: str = DEFAULT_INPUT_PATH
    log_level: str = "INFO"
    log_json: bool = False

    def base_url(self) -> str:
        """Get the base URL without a trailing slash."""
        return self.base_url_raw.rstrip("/")

    @property
    def has_credentials(self) -> bool:
        return bool(self.user)

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "SAPConfig":
        """Build configuration from environment variables.

        Raises:
            ValueError: If SAP_BASE_URL is missing or a numeric value is invalid
        """
        if load_env_file and _env_path.exists():
            load_dotenv(_env_path)

        base_url = os.getenv("SAP_BASE_URL")
        if not base_url:
            raise ValueError(
                "SAP_BASE_URL environment variable not set. "
                "Set to your SAP gateway URL (e.g., 'https://sap.example.com/sap/opu/odata/sap')"
            )

        timeout_raw = os.getenv("SAP_TIMEOUT_SECONDS", "30")
        try:
            timeout = float(timeout_raw)
        except ValueError:
            raise ValueError(f"SAP_TIMEOUT_SECONDS must be a number, got {timeout_raw!r}")

        return cls(
            base_url_raw=base_url,
            user=os.getenv("SAP_USER") or None,
            password=os.getenv("SAP_PASSWORD") or None,
            sap_client=os.getenv("SAP_CLIENT", "100"),
            timeout_seconds=timeout,
            input_path=os.getenv("SAP_INPUT_PATH", DEFAULT_INPUT_PATH),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_json=_as_bool(os.getenv("LOG_JSON")),
        )
