from pydantic import BaseModel, Field
from typing import List, Optional, Any, Dict


# Конверт запроса от GUI: позиционные аргументы endpoint'а
class EndpointRequest(BaseModel):
    args: List[Any] = Field(default_factory=list)


class EndpointResponse(BaseModel):
    ok: bool
    result: Any = None
    error: Optional[str] = None


class HealthCheck(BaseModel):
    status: str
    service: str
    version: str
    timestamp: float
    services: Dict[str, str] = Field(default_factory=dict)
    endpoints: List[str] = Field(default_factory=list)
