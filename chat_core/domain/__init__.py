"""领域层模型与协议。

包含：
- models: Message / ChatConfig / ChatRequest / TurnOutcome 等模型。
- transcript: Transcript 存储协议 TranscriptStore。
- exceptions: 业务异常类型定义。
"""
