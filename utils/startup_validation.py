"""
Startup Validation Module

1. Configuration validation - fail fast on missing critical settings
2. Database connectivity check
3. Structured startup logging
"""

import os
import sys
import logging
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy import text

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of a validation check."""
    name: str
    passed: bool
    message: str
    severity: str = "error"  # error, warning, info
    remediation: Optional[str] = None


@dataclass
class StartupReport:
    """Startup validation report."""
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    environment: str = "unknown"
    validations: List[ValidationResult] = field(default_factory=list)
    ready_for_production: bool = False

    def add_validation(self, result: ValidationResult):
        self.validations.append(result)

    def has_critical_failures(self) -> bool:
        return any(v.severity == "error" and not v.passed for v in self.validations)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "environment": self.environment,
            "ready_for_production": self.ready_for_production,
            "validations": [
                {
                    "name": v.name,
                    "passed": v.passed,
                    "message": v.message,
                    "severity": v.severity,
                    "remediation": v.remediation
                }
                for v in self.validations
            ],
            "summary": {
                "total_validations": len(self.validations),
                "passed": sum(1 for v in self.validations if v.passed),
                "failed": sum(1 for v in self.validations if not v.passed),
            }
        }


class StartupValidator:
    """
    Validates:
    1. Required environment variables
    2. Database connectivity
    3. Session secret strength
    """

    REQUIRED_ENV_VARS = [
        ("SESSION_SECRET", "Session encryption key - CRITICAL for security"),
        ("DATABASE_URL", "Database connection string"),
    ]

    RECOMMENDED_ENV_VARS = [
        ("CEO_EMAIL", "Reserved address provisioned with the CEO role (defaults to ceo@company.com)"),
    ]

    def __init__(self, engine=None, environ=None):
        self.engine = engine
        self.environ = os.environ if environ is None else environ
        self.report = StartupReport()
        self.report.environment = self.environ.get("FLASK_ENV", "development")

    def is_production(self) -> bool:
        return self.report.environment == "production"

    def validate_required_env_vars(self) -> None:
        """Check all required environment variables are set."""
        for var_name, description in self.REQUIRED_ENV_VARS:
            if self.environ.get(var_name):
                self.report.add_validation(ValidationResult(
                    name=f"env:{var_name}",
                    passed=True,
                    message=f"{var_name} is configured",
                ))
            else:
                # Defaults exist for development; only production treats these as fatal.
                self.report.add_validation(ValidationResult(
                    name=f"env:{var_name}",
                    passed=not self.is_production(),
                    message=f"Missing required: {var_name}",
                    severity="error" if self.is_production() else "warning",
                    remediation=f"Set {var_name} environment variable. {description}"
                ))

    def validate_recommended_env_vars(self) -> None:
        for var_name, description in self.RECOMMENDED_ENV_VARS:
            value = self.environ.get(var_name)
            self.report.add_validation(ValidationResult(
                name=f"env:{var_name}",
                passed=True,
                message=f"{var_name} is configured" if value else f"Optional: {var_name} not set - {description}",
                severity="warning",
                remediation=None if value else f"Consider setting {var_name}. {description}"
            ))

    def validate_database_connection(self) -> None:
        if self.engine is None:
            self.report.add_validation(ValidationResult(
                name="db:connection",
                passed=False,
                message="No database engine configured",
                remediation="Set DATABASE_URL to a valid connection string"
            ))
            return

        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            self.report.add_validation(ValidationResult(
                name="db:connection",
                passed=True,
                message="Database connection successful",
            ))
        except Exception as e:
            self.report.add_validation(ValidationResult(
                name="db:connection",
                passed=False,
                message=f"Database connection failed: {str(e)[:100]}",
                remediation="Check DATABASE_URL and ensure the database is accessible"
            ))

    def validate_secret_key_strength(self) -> None:
        """Validate session secret key meets security requirements."""
        secret = self.environ.get("SESSION_SECRET", "")
        if secret and len(secret) < 32:
            self.report.add_validation(ValidationResult(
                name="security:session_secret",
                passed=not self.is_production(),
                message=f"SESSION_SECRET too short ({len(secret)} chars, need 32+)",
                severity="error" if self.is_production() else "warning",
                remediation="Use at least 32 characters for SESSION_SECRET"
            ))

    def run_all_validations(self) -> StartupReport:
        """Run all validation checks and return the report."""
        logger.info(f"Startup validation, environment: {self.report.environment}")

        self.validate_required_env_vars()
        self.validate_recommended_env_vars()
        self.validate_database_connection()
        self.validate_secret_key_strength()

        self.report.ready_for_production = not self.report.has_critical_failures()

        summary = self.report.to_dict()["summary"]
        logger.info(f"Validations: {summary['passed']}/{summary['total_validations']} passed")
        for v in self.report.validations:
            if not v.passed and v.severity == "error":
                logger.error(f"  - {v.name}: {v.message}")
                if v.remediation:
                    logger.error(f"    Fix: {v.remediation}")
            elif v.severity == "warning" and v.remediation:
                logger.warning(f"  - {v.name}: {v.message}")

        return self.report

    def fail_if_not_ready(self) -> None:
        """
        In development, log warnings but continue.
        In production, exit with error code.
        """
        if not self.report.ready_for_production:
            if self.is_production():
                logger.critical("Application cannot start - critical configuration missing")
                sys.exit(1)
            else:
                logger.warning("Development mode: continuing despite validation failures")


def run_startup_validation(engine=None) -> StartupReport:
    """Call at application startup before serving requests."""
    validator = StartupValidator(engine=engine)
    report = validator.run_all_validations()
    validator.fail_if_not_ready()
    return report
