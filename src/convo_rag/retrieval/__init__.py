"""Built-in passage retrievers and loaders."""

from .dense import DensePassageRetriever
from .loader import load_passages
from .sparse import SparsePassageRetriever

__all__ = ["DensePassageRetriever", "SparsePassageRetriever", "load_passages"]
