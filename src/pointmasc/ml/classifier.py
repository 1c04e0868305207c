"""
Classifier - wlasciciel modelu i punkt wejscia dla warstwy prezentacji

Zadna metoda nie rzuca wyjatku na zewnatrz - bledy wracaja jako
OperationResult (kind + komunikat).
"""

from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Type, Union
import logging

from ..core.point_cloud import IndexSubset
from ..errors import ErrorKind, InternalError, MascError, ModelError, OperationResult
from ..features.descriptor import FeatureSet
from .background import CancelToken, ProgressCallback
from .evaluation import AccuracyMetrics, EvaluationWorkflow
from .model import RandomTreesModel, RandomTreesParams, TrainableModel
from .training import TrainingWorkflow

logger = logging.getLogger(__name__)


class Classifier:
    """
    Klasyfikator chmur punktow

    Model jest wlasnoscia klasyfikatora. Trening i wczytanie zastepuja go
    w calosci (nigdy nie lacza ze starym).

    Usage:
        clf = Classifier()
        result = clf.train(features, RandomTreesParams(max_tree_count=50))
        metrics, result = clf.evaluate(features, cloud.get_subset("test"))
        clf.save("classifier.pkl")
    """

    def __init__(self, model_class: Type[TrainableModel] = RandomTreesModel, background: bool = False):
        """
        Args:
            model_class: klasa modelu (tworzenie i wczytywanie)
            background: trening/ewaluacja na watku roboczym
        """
        self.model_class = model_class
        self.model: Optional[TrainableModel] = None
        self.training = TrainingWorkflow(background=background)
        self.evaluation = EvaluationWorkflow(background=background)

    def create_model(self) -> TrainableModel:
        return self.model_class()

    def replace_model(self, model: TrainableModel) -> None:
        self.model = model

    def reset(self) -> None:
        """Porzuca model (stan niewytrenowany)"""
        self.model = None

    def is_trained(self) -> bool:
        return self.model is not None and self.model.is_trained()

    def is_valid(self) -> bool:
        return self.is_trained()

    def train(
        self,
        features: FeatureSet,
        params: Optional[RandomTreesParams] = None,
        subset: Optional[IndexSubset] = None,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancelToken] = None
    ) -> OperationResult:
        return self.training.run(self, features, params, subset, progress_callback, cancel_token)

    def evaluate(
        self,
        features: FeatureSet,
        subset: Optional[IndexSubset],
        progress_callback: Optional[ProgressCallback] = None
    ) -> Tuple[AccuracyMetrics, OperationResult]:
        return self.evaluation.run(self, features, subset, progress_callback)

    def save(self, path: Union[str, Path]) -> OperationResult:
        """Zapisuje model do pliku"""
        if not self.is_trained():
            error = ModelError(ErrorKind.NOT_TRAINED, "Classifier hasn't been trained, can't save it")
            logger.warning(error.message)
            return OperationResult.failure(error)

        try:
            path = self.model.save(path) or path
        except MascError as e:
            logger.error(f"Failed to save classifier: {e}")
            return OperationResult.failure(e)
        except Exception as e:
            logger.error(f"Unexpected error while saving classifier: {e}", exc_info=True)
            return OperationResult.failure(InternalError(f"Internal error: {e}"))

        return OperationResult.ok(f"Classifier file saved to: {path}")

    def load(self, path: Union[str, Path]) -> OperationResult:
        """
        Wczytuje model z pliku

        Nieudane wczytanie zostawia poprzedni model. Wczytany, ale
        niewytrenowany model to ostrzezenie, nie blad.
        """
        try:
            model = self.model_class.load(path)
        except MascError as e:
            logger.error(f"Failed to load classifier: {e}")
            return OperationResult.failure(e)
        except Exception as e:
            logger.error(f"Unexpected error while loading classifier: {e}", exc_info=True)
            return OperationResult.failure(InternalError(f"Internal error: {e}"))

        self.replace_model(model)

        warnings = []
        if not model.is_trained():
            warnings.append("Loaded classifier doesn't seem to be trained")
            logger.warning(warnings[-1])

        return OperationResult.ok(f"Classifier loaded from {path}", warnings)

    def feature_importance(self, features: Optional[FeatureSet] = None) -> Optional[Dict[str, float]]:
        """
        Waznosc cech (None gdy model jej nie przechowuje)

        Args:
            features: cechy uzyte do treningu - nazwy kluczy; domyslnie feature_<i>
        """
        if not self.is_trained():
            return None
        importance = self.model.feature_importance()
        if importance is None:
            return None

        if features is not None and len(features) == len(importance):
            names = [f.column_name for f in features]
        else:
            names = [f"feature_{i}" for i in range(len(importance))]
        return {name: float(value) for name, value in zip(names, importance)}

    def model_info(self) -> Dict[str, Any]:
        """Zwraca informacje o modelu"""
        info: Dict[str, Any] = {
            'model_class': self.model_class.__name__,
            'is_trained': self.is_trained(),
            'n_features': self.model.n_features if self.model is not None else None,
        }
        if isinstance(self.model, RandomTreesModel) and self.model.is_trained():
            info['classes'] = self.model.classes.tolist()
            info['n_trees'] = len(self.model.model.estimators_)
        return info
