"""Request and response schemas for the HTTP API."""
from typing import List, Optional

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Body of POST /api/chat."""
    message: Optional[str] = None
    sessionId: str = Field(default="default", description="Client-generated session key")
    userId: str = Field(default="anonymous", description="Informational only")


class ChatResponse(BaseModel):
    response: str
    sessionId: str
    timestamp: str


class TrainRequest(BaseModel):
    """Body of POST /api/train."""
    input: Optional[str] = None
    output: Optional[str] = None
    category: str = "general"


class TrainResponse(BaseModel):
    message: str
    totalExamples: int


class TrainingExampleOut(BaseModel):
    id: int
    input: str
    output: str
    category: str
    timestamp: str


class TrainingListResponse(BaseModel):
    data: List[TrainingExampleOut]
    count: int


class ClearResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    trainingExamples: int
