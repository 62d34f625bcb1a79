from .engine import InferenceEngine
from .handler import ChunkData, StreamHandler, track_stream
