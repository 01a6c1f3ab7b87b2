"""Training example data models."""
from dataclasses import dataclass, asdict
from typing import Any, Dict


@dataclass(frozen=True)
class TrainingExample:
    """A labeled input/output exemplar used to steer responses."""
    id: int  # epoch milliseconds, strictly increasing within a process
    input: str
    output: str
    category: str
    timestamp: str  # ISO 8601, UTC

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrainingExample":
        return cls(
            id=int(data["id"]),
            input=str(data["input"]),
            output=str(data["output"]),
            category=str(data.get("category", "general")),
            timestamp=str(data.get("timestamp", "")),
        )
