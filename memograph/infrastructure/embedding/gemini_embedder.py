import logging
from typing import List

import google.generativeai as genai

from memograph.core.interfaces.ports import IEmbeddingProvider
from memograph.infrastructure.llm.gemini_provider import configure

logger = logging.getLogger(__name__)


class GeminiEmbeddingProvider(IEmbeddingProvider):
    def __init__(self, api_key: str = None, model_name: str = "models/text-embedding-004", dimension: int = 768):
        configure(api_key)
        self.model_name = model_name
        self.dimension = dimension

    def embed(self, text: str) -> List[float]:
        # Failures degrade to an empty vector; every similarity against it is 0.
        try:
            result = genai.embed_content(model=self.model_name, content=text)
            return [float(v) for v in result["embedding"]]
        except Exception as e:
            logger.error("Embedding error: %s", e)
            return []

    def get_dimension(self) -> int:
        return self.dimension
