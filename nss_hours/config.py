"""Konfiguration für die NSS-Stunden-Engine"""
import secrets
import os
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
import logging

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Anwendungs-Einstellungen mit Validierung

    Alle Einstellungen können via Umgebungsvariablen (.env) überschrieben werden.
    """

    # App-Grundeinstellungen
    app_name: str = Field(
        default="NSS Hours",
        description="Name der Anwendung"
    )
    app_version: str = Field(
        default="0.1.0",
        description="Version der Anwendung"
    )
    debug: bool = Field(
        default=False,
        description="Debug-Modus (nur für Entwicklung)"
    )

    # Datenbank
    database_url: str = Field(
        default="sqlite:///./nss_hours.db",
        description="Datenbank-URL (SQLite oder PostgreSQL)"
    )

    # Logging
    log_file: str = Field(
        default="logs/nss_hours.log",
        description="Pfad zur rotierenden Log-Datei"
    )
    log_level: str = Field(
        default="INFO",
        description="Log-Level (DEBUG, INFO, WARNING, ERROR), im Debug-Modus immer DEBUG"
    )
    log_max_bytes: int = Field(
        default=10 * 1024 * 1024,
        ge=1024,
        description="Maximale Größe einer Log-Datei vor der Rotation"
    )
    log_backup_count: int = Field(
        default=5,
        ge=0,
        description="Anzahl aufbewahrter rotierter Log-Dateien"
    )

    # Rate Limiting
    rate_limit: str = Field(
        default="200/minute",
        description="Standard-Rate-Limit pro Client-IP (slowapi-Syntax)"
    )

    # Server
    host: str = Field(
        default="127.0.0.1",
        description="Server-Host (0.0.0.0 für alle Interfaces, 127.0.0.1 nur lokal)"
    )
    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Server-Port (1-65535)"
    )

    # Security
    # Wird automatisch generiert, falls nicht in .env gesetzt
    secret_key: str = Field(
        default_factory=lambda: secrets.token_urlsafe(32),
        min_length=32,
        description="Secret key für Session-Verschlüsselung (min. 32 Zeichen)"
    )

    # Fachliche Voreinstellungen
    default_session_hours: int = Field(
        default=4,
        ge=0,
        le=24,
        description="Stunden für Freiwillige, die im Anwesenheits-Set auf 'present' geschaltet werden"
    )
    top_events_limit: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Anzahl der Events im Top-Events-Report"
    )
    trend_months: int = Field(
        default=12,
        ge=1,
        le=60,
        description="Anzahl Monate (inkl. aktuellem) im Monatstrend-Report"
    )
    export_report_name: str = Field(
        default="nss-hours",
        description="Basisname für Export-Dateien ({name}-{datum}.{ext})"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignoriere unbekannte Env-Vars
    )

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validiert die Datenbank-URL"""
        if not v:
            raise ValueError("DATABASE_URL darf nicht leer sein")

        # Erlaube SQLite und PostgreSQL
        if not (v.startswith("sqlite://") or v.startswith("postgresql://")):
            raise ValueError(
                "DATABASE_URL muss mit 'sqlite://' oder 'postgresql://' beginnen"
            )

        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Nur Standard-Level von logging"""
        v = v.strip().upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError("LOG_LEVEL muss DEBUG, INFO, WARNING, ERROR oder CRITICAL sein")
        return v

    @field_validator("export_report_name")
    @classmethod
    def validate_export_report_name(cls, v: str) -> str:
        """Dateiname darf weder leer sein noch Pfadtrenner enthalten"""
        v = v.strip()
        if not v:
            raise ValueError("EXPORT_REPORT_NAME darf nicht leer sein")
        if "/" in v or "\\" in v:
            raise ValueError("EXPORT_REPORT_NAME darf keine Pfadtrenner enthalten")
        return v

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        """Validiert den Secret Key"""
        if len(v) < 32:
            raise ValueError("SECRET_KEY muss mindestens 32 Zeichen lang sein")

        return v

    def is_secret_key_from_env(self) -> bool:
        """Prüft ob SECRET_KEY aus Umgebungsvariable gesetzt wurde"""
        return bool(os.getenv("SECRET_KEY"))


settings = Settings()
