"""可选模型配置。

核心把模型标识当作不透明字符串透传给后端；这里只维护设置界面
可供选择的模型列表及其展示名，便于集中升级或切换。"""

from dataclasses import dataclass
from typing import List, Mapping, Optional


@dataclass
class ModelOption:
    """单个可选模型。"""

    model_id: str
    label: str


MODEL_OPTIONS: Mapping[str, ModelOption] = {
    "gpt-4.1-mini": ModelOption(model_id="gpt-4.1-mini", label="GPT-4.1 Mini"),
    "gpt-4.1-nano": ModelOption(model_id="gpt-4.1-nano", label="GPT-4.1 Nano"),
    "gpt-3.5-turbo": ModelOption(model_id="gpt-3.5-turbo", label="GPT-3.5 Turbo"),
}


def list_model_options() -> List[ModelOption]:
    return list(MODEL_OPTIONS.values())


def get_model_option(model_id: str) -> Optional[ModelOption]:
    """根据标识查找模型，不区分大小写；未登记的模型返回 None（仍可透传使用）。"""

    key = model_id.lower()
    for k, opt in MODEL_OPTIONS.items():
        if k.lower() == key:
            return opt
    return None
