from aibridge.services.ai_service import AIService
from aibridge.services.chat import ChatService
from aibridge.services.embeddings import EmbeddingService
from aibridge.services.health import AIServiceHealthCheck, HealthCheckResult, HealthStatus
from aibridge.services.vector_store import VectorStoreService
from aibridge.services.vision import VisionService

__all__ = [
    "AIService",
    "AIServiceHealthCheck",
    "ChatService",
    "EmbeddingService",
    "HealthCheckResult",
    "HealthStatus",
    "VectorStoreService",
    "VisionService",
]
