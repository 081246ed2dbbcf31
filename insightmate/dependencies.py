from insightmate.llm.client import InferenceClient, get_inference_client
from insightmate.similarity.index import VectorIndex, get_shared_index


def get_inference() -> InferenceClient:
    """Inference service used by analysis and indexing routes (overridden in tests)."""
    return get_inference_client()


def get_vector_index() -> VectorIndex:
    return get_shared_index()
