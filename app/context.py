from __future__ import annotations
from dataclasses import dataclass, field
import os
from typing import Any, Optional

import firebase_admin
from firebase_admin import credentials
from fastapi import Request

from app.config import Settings
from app.database import Database
from app.llm.client import LLMClient
from app.services.xp_migration import MigrationTracker
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ServiceContext:
    """
    Process-wide handles to the external collaborators.

    Built once by the application lifespan and torn down at shutdown.
    """
    settings: Settings
    database: Database
    llm_client: LLMClient
    firebase_app: Optional[Any] = None
    migrations: MigrationTracker = field(default_factory=MigrationTracker)

    @classmethod
    def create(cls, settings: Settings, init_firebase: bool = True) -> "ServiceContext":
        database = Database(settings.DATABASE_URL, echo=settings.DEBUG)
        firebase_app = _init_firebase(settings) if init_firebase else None
        return cls(
            settings=settings,
            database=database,
            llm_client=LLMClient(api_key=settings.OPENAI_API_KEY, model=settings.OPENAI_MODEL),
            firebase_app=firebase_app,
        )

    def close(self) -> None:
        self.database.dispose()
        if self.firebase_app is not None:
            try:
                firebase_admin.delete_app(self.firebase_app)
            except ValueError as e:
                logger.warning(f"Firebase app already deleted: {e}")
            self.firebase_app = None


def _init_firebase(settings: Settings):
    """Initialize the Firebase Admin SDK with explicit credentials when available."""
    try:
        firebase_json_path = settings.FIREBASE_SERVICE_ACCOUNT_JSON
        if os.path.exists(firebase_json_path):
            cred = credentials.Certificate(firebase_json_path)
            app = firebase_admin.initialize_app(cred)
            logger.info("Initialized Firebase Admin with provided service account JSON")
        else:
            # Application Default Credentials from the environment
            options = {"projectId": settings.FIREBASE_PROJECT_ID} if settings.FIREBASE_PROJECT_ID else None
            app = firebase_admin.initialize_app(options=options)
            logger.warning(f"FIREBASE_SERVICE_ACCOUNT_JSON not found at {firebase_json_path}. Initialized Firebase with default credentials.")
        return app
    except Exception as e:
        logger.exception(f"Failed to initialize Firebase Admin SDK: {e}")
        raise


def get_context(request: Request) -> ServiceContext:
    """FastAPI dependency returning the application's ServiceContext."""
    return request.app.state.context


def get_llm_client(request: Request) -> LLMClient:
    return get_context(request).llm_client
