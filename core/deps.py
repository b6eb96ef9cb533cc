"""
Define functions/aliases for dependency injection
"""
from typing import Annotated, TypeAlias
from fastapi import Depends, Request

from core.config import Settings


# Settings are built once at process entry and live on app.state
def get_app_settings(request: Request) -> Settings:
  return request.app.state.settings

SettingsDep: TypeAlias = Annotated[Settings, Depends(get_app_settings)]
