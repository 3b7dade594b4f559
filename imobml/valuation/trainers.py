import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence
import numpy as np
from pydantic import BaseModel, ConfigDict
import xgboost as xgb

from .dataset import Dataset
from .solver import RIDGE_LAMBDA, ridge_solve

logger = logging.getLogger(__name__)


class TrainResult(BaseModel):
    """
    Outcome of one trainer.

    model is the JSON-serializable fitted model (weights list for linear
    trainers), or None with error set when the trainer was unavailable.
    """

    model_config = ConfigDict(protected_namespaces=())

    model: Optional[Any] = None
    trainer: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.model is not None


class ModelTrainer(ABC):
    """
    A capability provider that may or may not be able to fit a dataset.
    Low abstraction - fit returns a TrainResult instead of raising.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Trainer identifier."""
        pass

    @abstractmethod
    def fit(self, X: np.ndarray, y: np.ndarray) -> TrainResult:
        pass

    def unavailable(self, reason: str) -> TrainResult:
        return TrainResult(trainer=self.name, error=reason)


class XGBoostTrainer(ModelTrainer):
    """Gradient-boosted trees - higher-capacity trainer, tried first."""

    name = "xgboost"

    def __init__(
        self,
        enabled: bool = True,
        min_samples: int = 20,
        params: Optional[Dict[str, Any]] = None,
        random_seed: int = 42,
    ):
        self.enabled = enabled
        self.min_samples = min_samples
        self.params = {
            "n_estimators": 50,
            "max_depth": 4,
            "learning_rate": 0.3,
            "objective": "reg:squarederror",
        }
        self.params.update(params or {})
        self.random_seed = random_seed

    def fit(self, X: np.ndarray, y: np.ndarray) -> TrainResult:
        if not self.enabled:
            return self.unavailable("disabled")
        if len(y) < self.min_samples:
            return self.unavailable(f"needs at least {self.min_samples} samples, got {len(y)}")
        try:
            booster_params = {k: v for k, v in self.params.items() if k != "n_estimators"}
            booster_params["seed"] = self.random_seed
            booster = xgb.train(
                booster_params,
                xgb.DMatrix(X, label=y),
                num_boost_round=int(self.params["n_estimators"]),
            )
            booster_json = json.loads(bytes(booster.save_raw(raw_format="json")))
            return TrainResult(
                model={"type": "xgboost", "params": self.params, "booster": booster_json},
                trainer=self.name,
            )
        except Exception as e:
            logger.warning(f"XGBoost training failed: {e}")
            return self.unavailable(str(e))


class RidgeTrainer(ModelTrainer):
    """Closed-form ridge regression - always-available fallback."""

    name = "ridge"

    def __init__(self, lam: float = RIDGE_LAMBDA):
        self.lam = lam

    def fit(self, X: np.ndarray, y: np.ndarray) -> TrainResult:
        weights = ridge_solve(X, y, lam=self.lam)
        if weights is None:
            return self.unavailable("singular normal-equations matrix")
        return TrainResult(model=[float(w) for w in weights], trainer=self.name)


def default_trainers(gbm_enabled: bool = True) -> List[ModelTrainer]:
    """Ranked providers: boosted trees first, ridge fallback."""
    return [XGBoostTrainer(enabled=gbm_enabled), RidgeTrainer()]


def fit_first_available(trainers: Sequence[ModelTrainer], dataset: Dataset) -> TrainResult:
    """
    Walk the ranked trainers and return the first successful fit.

    An empty dataset is not an error: it yields a result without a model.
    """
    if len(dataset) == 0:
        return TrainResult(error="empty dataset")

    X, y = dataset.X, dataset.y
    errors = []
    for trainer in trainers:
        result = trainer.fit(X, y)
        if result.ok:
            logger.info(f"Trained with {trainer.name} on {len(y)} samples")
            return result
        logger.info(f"Trainer {trainer.name} unavailable: {result.error}")
        errors.append(f"{trainer.name}: {result.error}")

    logger.warning(f"No trainer could fit {len(y)} samples")
    return TrainResult(error="; ".join(errors))
