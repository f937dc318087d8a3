"""配置管理模块。

支持从环境变量、.env 以及 config.yaml 加载配置。

注意：openai_api_key 只是一个可选的默认值来源（透传给后端），
本模块不会把任何凭据写回磁盘。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("CHAT_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class Settings(BaseSettings):
    """客户端配置（使用 Pydantic）。"""

    # ---- 后端相关配置 ----
    backend_base_url: str = Field(
        default="http://localhost:8000",
        description="聊天后端的基础 URL（提供 /api/chat 与 /api/health）",
    )
    http_timeout: float = Field(default=30.0, ge=1.0, description="HTTP 超时时间（秒）")

    # ---- 会话默认值（可被调用方逐项覆盖） ----
    default_model: str = Field(default="gpt-4.1-mini", description="默认模型标识")
    default_developer_message: str = Field(
        default="You are a helpful AI assistant.",
        description="默认的系统指令（developer message）",
    )
    openai_api_key: Optional[str] = Field(
        default=None,
        description="可选的默认 API 密钥，仅透传，不做任何持久化",
    )

    # ---- 流式解码 ----
    stream_encoding: str = Field(default="utf-8", description="响应体文本编码")

    # ---- 日志 ----
    log_dir: str = Field(default="logs", description="日志目录")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator("backend_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("openai_api_key")
    @classmethod
    def blank_key_as_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


settings = Settings()
