"""Data models for the Training-aware Chat Relay."""
from .conversation import Turn, USER, ASSISTANT, ROLES
from .training import TrainingExample
from .api import (
    ChatRequest,
    ChatResponse,
    TrainRequest,
    TrainResponse,
    TrainingExampleOut,
    TrainingListResponse,
    ClearResponse,
    HealthResponse,
)

__all__ = [
    "Turn",
    "USER",
    "ASSISTANT",
    "ROLES",
    "TrainingExample",
    "ChatRequest",
    "ChatResponse",
    "TrainRequest",
    "TrainResponse",
    "TrainingExampleOut",
    "TrainingListResponse",
    "ClearResponse",
    "HealthResponse",
]
