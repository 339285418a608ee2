"""Application configuration."""
import os
from dataclasses import dataclass
from typing import Mapping, Optional

basedir = os.path.abspath(os.path.dirname(__file__))


def _env_bool(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-production")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Logging
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_TO_FILE = _env_bool("LOG_TO_FILE")

    # Receipt layout
    PRINTER_LINE_WIDTH = int(os.environ.get("PRINTER_LINE_WIDTH", 32))  # 58mm BLE printers
    PRINTER_ENCODING = os.environ.get("PRINTER_ENCODING", "cp437")
    DEFAULT_CURRENCY = os.environ.get("DEFAULT_CURRENCY", "USD")

    # BLE transport
    BLE_CHUNK_SIZE = int(os.environ.get("BLE_CHUNK_SIZE", 128))
    BLE_CHUNK_DELAY = float(os.environ.get("BLE_CHUNK_DELAY", 0.1))
    BLE_WRITE_ATTEMPTS = int(os.environ.get("BLE_WRITE_ATTEMPTS", 3))
    BLE_BACKOFF_BASE = float(os.environ.get("BLE_BACKOFF_BASE", 0.2))
    BLE_MAX_RECONNECTS = int(os.environ.get("BLE_MAX_RECONNECTS", 3))
    BLE_SCAN_TIMEOUT = float(os.environ.get("BLE_SCAN_TIMEOUT", 10.0))
    BLE_DEVICE_ADDRESS = os.environ.get("BLE_DEVICE_ADDRESS") or None


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        f"sqlite:///{os.path.join(os.path.dirname(basedir), 'instance', 'printer.db')}"
    )


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        f"sqlite:///{os.path.join(os.path.dirname(basedir), 'instance', 'printer.db')}"
    )


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    BLE_CHUNK_DELAY = 0.0
    BLE_BACKOFF_BASE = 0.0


config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}


@dataclass(frozen=True)
class PrinterSettings:
    """Printer settings, decoupled from Flask's config object."""
    line_width: int = 32
    encoding: str = "cp437"
    default_currency: str = "USD"
    chunk_size: int = 128
    chunk_delay: float = 0.1
    write_attempts: int = 3
    backoff_base: float = 0.2
    max_reconnects: int = 3
    scan_timeout: float = 10.0
    device_address: Optional[str] = None

    @classmethod
    def from_mapping(cls, values: Mapping) -> "PrinterSettings":
        """Build settings from a Flask config (or any mapping)."""
        defaults = cls()
        return cls(
            line_width=int(values.get("PRINTER_LINE_WIDTH", defaults.line_width)),
            encoding=values.get("PRINTER_ENCODING", defaults.encoding),
            default_currency=values.get("DEFAULT_CURRENCY", defaults.default_currency),
            chunk_size=int(values.get("BLE_CHUNK_SIZE", defaults.chunk_size)),
            chunk_delay=float(values.get("BLE_CHUNK_DELAY", defaults.chunk_delay)),
            write_attempts=int(values.get("BLE_WRITE_ATTEMPTS", defaults.write_attempts)),
            backoff_base=float(values.get("BLE_BACKOFF_BASE", defaults.backoff_base)),
            max_reconnects=int(values.get("BLE_MAX_RECONNECTS", defaults.max_reconnects)),
            scan_timeout=float(values.get("BLE_SCAN_TIMEOUT", defaults.scan_timeout)),
            device_address=values.get("BLE_DEVICE_ADDRESS", defaults.device_address),
        )
