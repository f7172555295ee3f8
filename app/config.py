"""Настройки конфигурации."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.constants import MAX_SOURCE_BYTES


class Config(BaseSettings):
    """Конфигурация приложения."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore"
    )

    # Файл или директория с исходниками (обязательно)
    source_path: str

    # Анализ
    max_source_bytes: int = Field(default=MAX_SOURCE_BYTES, gt=0)

    # Раскладка
    layout_algorithm: Literal["auto", "hierarchical", "horizontal", "grid", "circular"] = (
        Field(default="auto")
    )
    layout_direction: Literal["TB", "BT", "LR", "RL"] = Field(default="TB")
    grid_columns: int = Field(default=5, ge=1)
    simplify: bool = Field(default=False)  # только экспортированные + их прямые вызовы

    # Вывод
    artifacts_dir: str = Field(default="__artifacts__")
    log_level: str = Field(default="INFO")
