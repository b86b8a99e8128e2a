"""
Application startup validation and store construction.

Checks the configuration before serving requests and builds the document
store, realtime store and auth provider for the configured backend.
"""

import logging
import os
import sys
from dataclasses import dataclass
from typing import List, Tuple

from core.auth import AuthProvider, FirebaseAuthProvider
from core.config import Settings, validate_production_config
from core.firebase import FirebaseRealtimeStore, FirestoreDocumentStore, initialize_firebase
from core.memory_store import InMemoryAuthProvider, InMemoryDocumentStore, InMemoryRealtimeStore
from core.stores import DocumentStore, RealtimeStore

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class Backends:
    document_store: DocumentStore
    realtime_store: RealtimeStore
    auth_provider: AuthProvider


class StartupValidator:
    """Validates application startup requirements"""

    def __init__(self, config: Settings):
        self.config = config
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def check_environment_config(self) -> bool:
        """Validate environment configuration"""
        try:
            validate_production_config(self.config)
        except ValueError as e:
            self.errors.append(f"Configuration validation failed: {str(e)}")
            return False
        return True

    def check_firebase_config(self) -> bool:
        """Check that the hosted stores can be reached with the given settings"""
        if self.config.uses_memory_store:
            self.warnings.append("STORE_BACKEND is 'memory' - data is not persisted")
            return True

        path = self.config.firebase_credentials_path
        if path and not os.path.isfile(path):
            self.errors.append(f"Firebase credentials file not found: {path}")
            return False
        if not path:
            self.warnings.append(
                "FIREBASE_CREDENTIALS_PATH not set - using application default credentials"
            )
        if not self.config.firebase_database_url:
            self.errors.append("FIREBASE_DATABASE_URL is required for the realtime store")
            return False
        return True

    def validate_all(self) -> Tuple[bool, List[str], List[str]]:
        """Run all validation checks"""
        checks = [
            ("Environment Configuration", self.check_environment_config),
            ("Firebase Configuration", self.check_firebase_config),
        ]

        all_passed = True
        for check_name, check_func in checks:
            logger.info(f"Running check: {check_name}")
            if not check_func():
                all_passed = False

        return all_passed, self.errors, self.warnings


def run_startup_checks(config: Settings) -> Tuple[bool, List[str]]:
    """Run all startup validation checks"""
    logger.info(f"Starting restaurant admin console ({config.environment})")

    validator = StartupValidator(config)
    passed, errors, warnings = validator.validate_all()

    for warning in warnings:
        logger.warning(f"Startup warning: {warning}")
    for error in errors:
        logger.error(f"Startup error: {error}")

    if not passed and config.is_production:
        logger.error("Cannot start in production with errors!")
        sys.exit(1)
    elif not passed:
        logger.warning(f"Starting in {config.environment} mode despite errors")
    else:
        logger.info("All startup checks passed")

    return passed, warnings


def configure_startup_logging(config: Settings):
    """Configure logging for startup"""
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


def build_backends(config: Settings) -> Backends:
    """Stores and auth provider for ``STORE_BACKEND``."""
    if config.uses_memory_store:
        logger.info("Using in-memory stores")
        return Backends(
            document_store=InMemoryDocumentStore(),
            realtime_store=InMemoryRealtimeStore(),
            auth_provider=InMemoryAuthProvider(),
        )

    firebase_app = initialize_firebase(config)
    return Backends(
        document_store=FirestoreDocumentStore(firebase_app),
        realtime_store=FirebaseRealtimeStore(firebase_app),
        auth_provider=FirebaseAuthProvider(firebase_app),
    )
