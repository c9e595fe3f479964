from __future__ import annotations

from functools import lru_cache
from typing import Callable, Optional

from fastapi import Depends, Header

from day_planner.config.settings import TASKS_DIR, PlannerSettings
from day_planner.errors import MissingCredentialsError
from day_planner.google_api.providers import google_providers
from day_planner.llm.client import OpenAIModelClient
from day_planner.models import Identity
from day_planner.pipeline.orchestrator import WorkflowOrchestrator
from day_planner.providers import ProviderSet
from day_planner.storage.tasks import JsonTaskStore


@lru_cache(maxsize=1)
def get_settings() -> PlannerSettings:
    return PlannerSettings.from_env()


def get_connect(
    settings: PlannerSettings = Depends(get_settings),
) -> Callable[[Identity], ProviderSet]:
    return lambda identity: google_providers(identity, settings)


def get_orchestrator(
    settings: PlannerSettings = Depends(get_settings),
    connect: Callable[[Identity], ProviderSet] = Depends(get_connect),
) -> WorkflowOrchestrator:
    model = OpenAIModelClient(model=settings.model, timeout=settings.model_timeout)
    return WorkflowOrchestrator(connect=connect, model=model, settings=settings)


def get_identity(
    authorization: Optional[str] = Header(default=None),
    x_user_id: Optional[str] = Header(default=None),
) -> Identity:
    # Google access token as a bearer token, user id for the task store.
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise MissingCredentialsError("Expected 'Authorization: Bearer <google token>'.")
    if not x_user_id or not x_user_id.strip():
        raise MissingCredentialsError("Missing X-User-Id header.")
    return Identity(user_id=x_user_id.strip(), access_token=token.strip())


def get_task_store(identity: Identity = Depends(get_identity)) -> JsonTaskStore:
    return JsonTaskStore.for_user(TASKS_DIR, identity.user_id)
