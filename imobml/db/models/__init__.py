from .base import Base
from .analysis import Analysis, ExtractedListing
from .feature_snapshot import FeatureSnapshot
from .price_history import PriceHistory
from .tts_label import TtsLabel
from .score_snapshot import ScoreSnapshot
from .model_metrics import ModelMetrics
