"""对外 API 服务模块。

提供简化的函数接口供展示层（命令行、GUI 等）调用。
"""

from typing import Optional, Dict, Any

from chat_core.config.settings import settings
from chat_core.domain.models import ChatConfig
from chat_core.domain.transcript import TranscriptStore
from chat_core.agents.chat_agent import ChatEngine
from chat_core.infrastructure.storage.memory_store import InMemoryTranscriptStore
from chat_core.providers import create_transport
from chat_core.providers.registry import list_model_options


_store: Optional[TranscriptStore] = None
_engine: Optional[ChatEngine] = None


def get_default_engine() -> ChatEngine:
    """获取默认的 ChatEngine 实例（单例）。"""
    global _store, _engine
    if _store is None:
        _store = InMemoryTranscriptStore()
    if _engine is None:
        _engine = ChatEngine(store=_store, transport=create_transport())
    return _engine


def reset_default_engine() -> None:
    """丢弃单例（切换后端配置或测试时使用）。"""
    global _store, _engine
    _store = None
    _engine = None


def build_config(
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    developer_message: Optional[str] = None,
) -> ChatConfig:
    """由设置默认值与调用方覆盖项组装 ChatConfig。

    未提供 api_key 时回退到 settings.openai_api_key（同样只透传）。
    """
    return ChatConfig(
        api_key=api_key if api_key is not None else (settings.openai_api_key or ""),
        model=model or settings.default_model,
        developer_message=(
            developer_message if developer_message is not None else settings.default_developer_message
        ),
    )


def send_message(
    user_input: str,
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    developer_message: Optional[str] = None,
) -> Dict[str, Any]:
    """运行一个对话回合。

    Args:
        user_input: 用户输入内容
        api_key: API 密钥（可选，默认取配置）
        model: 模型标识（可选）
        developer_message: 系统指令（可选）

    Returns:
        包含回合结果与当前消息列表的字典
    """
    engine = get_default_engine()
    config = build_config(api_key=api_key, model=model, developer_message=developer_message)
    outcome = engine.submit_turn(user_input, config)
    return {
        "outcome": outcome.to_dict(),
        "messages": get_transcript(),
    }


def get_transcript() -> list[Dict[str, Any]]:
    """获取当前会话的所有消息（按会话顺序）。"""
    engine = get_default_engine()
    return [m.to_dict() for m in engine.snapshot()]


def get_state() -> Dict[str, Any]:
    """展示层可见的状态：是否在等待回复、当前错误提示、上一回合结果。"""
    state = get_default_engine().state
    return {
        "is_loading": state.is_loading,
        "error": state.error,
        "last_outcome": state.last_outcome.to_dict() if state.last_outcome else None,
    }


def clear_chat() -> bool:
    return get_default_engine().clear()


def settings_changed() -> None:
    get_default_engine().config_changed()


def check_backend() -> bool:
    """启动时调用一次，后端不可达时在 state.error 中给出提示。"""
    return get_default_engine().check_health()


def list_models() -> list[Dict[str, str]]:
    return [{"id": opt.model_id, "label": opt.label} for opt in list_model_options()]
