"""Model storage with offering-then-global resolution."""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

from scholarship_engine.core.enums import ModelScope
from scholarship_engine.core.exceptions import ModelNotFoundError
from scholarship_engine.models.schemas.model_weights import ModelWeights

logger = logging.getLogger(__name__)


class ModelStore(ABC):
    """
    Abstract holder of the latest published weights.

    Implementations publish whole ModelWeights objects; a reader holds
    either the previous model or the new one, never a mix.
    """

    @abstractmethod
    def get(self, offering_id: str) -> Optional[ModelWeights]:
        """Return the offering model, if one has been published."""
        pass

    @abstractmethod
    def get_global(self) -> Optional[ModelWeights]:
        """Return the global model, if one has been published."""
        pass

    @abstractmethod
    def publish(self, weights: ModelWeights) -> None:
        """Replace the entry for the weights' scope (and offering)."""
        pass

    def resolve(self, offering_id: Optional[str] = None) -> ModelWeights:
        """
        Pick the model to predict with.

        Args:
            offering_id: Offering being predicted for, if any

        Returns:
            The offering model when present, else the global model

        Raises:
            ModelNotFoundError: If neither exists
        """
        if offering_id:
            weights = self.get(offering_id)
            if weights is not None:
                return weights

        weights = self.get_global()
        if weights is not None:
            return weights

        raise ModelNotFoundError(
            f"No model published for offering {offering_id!r} and no global model"
        )


class InMemoryModelStore(ModelStore):
    """
    Process-local ModelStore.

    Writers build a new mapping and swap the reference under a lock. Readers
    take the current reference without locking.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._offering_models: Dict[str, ModelWeights] = {}
        self._global_model: Optional[ModelWeights] = None

    def get(self, offering_id: str) -> Optional[ModelWeights]:
        return self._offering_models.get(offering_id)

    def get_global(self) -> Optional[ModelWeights]:
        return self._global_model

    def publish(self, weights: ModelWeights) -> None:
        with self._lock:
            if weights.scope == ModelScope.GLOBAL:
                self._global_model = weights
            else:
                models = dict(self._offering_models)
                models[weights.offering_id] = weights
                self._offering_models = models

        logger.info(
            "Published %s model %s (offering=%s, %d samples)",
            weights.scope.value,
            weights.label,
            weights.offering_id,
            weights.training_size,
        )

    def offering_ids(self) -> list[str]:
        return sorted(self._offering_models)

    def clear(self) -> None:
        """Drop all models. Useful for testing."""
        with self._lock:
            self._offering_models = {}
            self._global_model = None
