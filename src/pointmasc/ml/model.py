"""
ML Model - Adapter na klasyfikator Random Forest

Zawiera:
- RandomTreesParams - hiperparametry lasu losowego
- TrainableModel - waski interfejs modelu (train/predict/save/load/is_trained)
- RandomTreesModel - implementacja na sklearn RandomForestClassifier

Reszta pakietu zna tylko TrainableModel, wiec model mozna podmienic
(np. na deterministyczny stub w testach).
"""

import numpy as np
from typing import Any, Dict, List, Optional, Union
from dataclasses import dataclass, asdict
from abc import ABC, abstractmethod
from pathlib import Path
import pickle
import warnings
import logging

from sklearn.ensemble import RandomForestClassifier

from ..config import PERSISTENCE, RANDOM_TREES
from ..errors import DataError, ErrorKind, ModelError, PersistenceError

logger = logging.getLogger(__name__)

_FORMAT_TAG = "pointmasc.random_trees"


@dataclass
class RandomTreesParams:
    """Hiperparametry lasu losowego"""
    max_depth: int = RANDOM_TREES.MAX_DEPTH  # <= 0 = bez limitu
    min_sample_count: int = RANDOM_TREES.MIN_SAMPLE_COUNT  # min probek do podzialu wezla
    max_tree_count: int = RANDOM_TREES.MAX_TREE_COUNT
    convergence_tolerance: float = RANDOM_TREES.CONVERGENCE_TOLERANCE  # 0 = tylko max_tree_count
    compute_variable_importance: bool = RANDOM_TREES.COMPUTE_VARIABLE_IMPORTANCE
    active_var_count: int = RANDOM_TREES.ACTIVE_VAR_COUNT  # cechy na podzial, 0 = sqrt(F)

    tree_growth_step: int = RANDOM_TREES.TREE_GROWTH_STEP
    random_state: Optional[int] = RANDOM_TREES.RANDOM_STATE
    n_jobs: int = RANDOM_TREES.N_JOBS
    class_weight: Optional[str] = None

    def __post_init__(self):
        if self.max_tree_count < 1:
            raise ValueError(f"max_tree_count must be >= 1, got {self.max_tree_count}")
        if self.tree_growth_step < 1:
            raise ValueError(f"tree_growth_step must be >= 1, got {self.tree_growth_step}")
        if self.convergence_tolerance < 0:
            raise ValueError(f"convergence_tolerance must be >= 0, got {self.convergence_tolerance}")
        if self.active_var_count < 0:
            raise ValueError(f"active_var_count must be >= 0, got {self.active_var_count}")


class TrainableModel(ABC):
    """Abstrakcyjny model klasyfikacji"""

    @abstractmethod
    def train(self, data: np.ndarray, labels: np.ndarray, params: Optional[RandomTreesParams] = None) -> 'TrainableModel':
        """Trenuje model. Przy bledzie rzuca ModelError i zostaje niewytrenowany"""
        pass

    @abstractmethod
    def predict(self, row: np.ndarray) -> int:
        """Przewiduje klase jednej probki"""
        pass

    def predict_many(self, data: np.ndarray) -> np.ndarray:
        """Przewiduje klasy wielu probek"""
        return np.array([self.predict(row) for row in data], dtype=np.int32)

    @abstractmethod
    def is_trained(self) -> bool:
        pass

    @property
    def n_features(self) -> Optional[int]:
        """Liczba cech, na ktorych model byl trenowany (None = nieznana)"""
        return None

    def feature_importance(self) -> Optional[np.ndarray]:
        return None

    @abstractmethod
    def save(self, path: Union[str, Path]) -> Optional[Path]:
        """Zapisuje model, zwraca sciezke pliku (None = jak podana)"""
        pass

    @classmethod
    @abstractmethod
    def load(cls, path: Union[str, Path]) -> 'TrainableModel':
        pass


class RandomTreesModel(TrainableModel):
    """
    Random Forest dla probek z chmur punktow

    Usage:
        model = RandomTreesModel()
        model.train(X, y, RandomTreesParams(max_tree_count=50))
        label = model.predict(X[0])
        model.save("classifier.pkl")
    """

    def __init__(self):
        self.model: Optional[RandomForestClassifier] = None
        self.params: Optional[RandomTreesParams] = None
        self._n_features = 0
        self._feature_importance: Optional[np.ndarray] = None
        self.oob_errors: List[float] = []

    def reset(self) -> None:
        """Wraca do stanu niewytrenowanego"""
        self.model = None
        self._n_features = 0
        self._feature_importance = None
        self.oob_errors = []

    def train(
        self,
        data: np.ndarray,
        labels: np.ndarray,
        params: Optional[RandomTreesParams] = None
    ) -> 'RandomTreesModel':
        """
        Trenuje las losowy

        Args:
            data: (N, F) macierz cech
            labels: (N,) kody klas
            params: hiperparametry

        Returns:
            self

        Raises:
            ModelError(TRAINING_FAILED)
        """
        params = params or RandomTreesParams()
        data = np.asarray(data, dtype=np.float32)
        labels = np.asarray(labels)

        self.reset()

        if data.ndim != 2 or data.shape[0] == 0 or data.shape[1] == 0:
            raise ModelError(ErrorKind.TRAINING_FAILED, f"Invalid training data shape {data.shape}")
        if labels.shape != (data.shape[0],):
            raise ModelError(
                ErrorKind.TRAINING_FAILED,
                f"Labels shape {labels.shape} doesn't match {data.shape[0]} samples"
            )

        logger.info(f"Training Random Forest on {len(data):,} samples, {data.shape[1]} features")

        forest = self._create_forest(params, data.shape[1])
        try:
            if params.convergence_tolerance > 0:
                self._grow_until_converged(forest, data, labels, params)
            else:
                forest.fit(data, labels)
        except Exception as e:
            self.reset()
            raise ModelError(ErrorKind.TRAINING_FAILED, f"Training failed: {e}") from e

        if not getattr(forest, 'estimators_', None):
            self.reset()
            raise ModelError(ErrorKind.TRAINING_FAILED, "Training failed for an unknown reason...")

        self.model = forest
        self.params = params
        self._n_features = data.shape[1]

        if params.compute_variable_importance:
            self._feature_importance = np.asarray(forest.feature_importances_, dtype=np.float64)

        logger.info(f"Random Forest trained: {len(forest.estimators_)} trees, "
                    f"{len(forest.classes_)} classes")
        return self

    def _create_forest(self, params: RandomTreesParams, n_features: int) -> RandomForestClassifier:
        max_features: Union[str, int] = "sqrt"
        if params.active_var_count > 0:
            max_features = min(params.active_var_count, n_features)

        return RandomForestClassifier(
            n_estimators=params.max_tree_count,
            max_depth=params.max_depth if params.max_depth > 0 else None,
            min_samples_split=max(2, params.min_sample_count),
            max_features=max_features,
            n_jobs=params.n_jobs,
            random_state=params.random_state,
            class_weight=params.class_weight,
            verbose=0
        )

    def _grow_until_converged(
        self,
        forest: RandomForestClassifier,
        data: np.ndarray,
        labels: np.ndarray,
        params: RandomTreesParams
    ) -> None:
        """Doklada drzewa az blad OOB przestanie sie zmieniac"""
        forest.set_params(warm_start=True, oob_score=True, bootstrap=True)

        n_trees = 0
        previous_error = None
        while n_trees < params.max_tree_count:
            n_trees = min(n_trees + params.tree_growth_step, params.max_tree_count)
            forest.set_params(n_estimators=n_trees)

            with warnings.catch_warnings():
                # Przy malej liczbie drzew czesc probek nie ma predykcji OOB
                warnings.simplefilter("ignore", UserWarning)
                forest.fit(data, labels)

            oob_error = 1.0 - float(forest.oob_score_)
            self.oob_errors.append(oob_error)
            logger.debug(f"  {n_trees} trees: OOB error {oob_error:.4f}")

            if previous_error is not None and abs(previous_error - oob_error) <= params.convergence_tolerance:
                logger.info(f"Forest converged at {n_trees} trees (OOB error {oob_error:.4f})")
                return
            previous_error = oob_error

        logger.info(f"Tree limit reached ({n_trees} trees)")

    def is_trained(self) -> bool:
        return self.model is not None and bool(getattr(self.model, 'estimators_', None))

    @property
    def n_features(self) -> Optional[int]:
        return self._n_features if self.is_trained() else None

    @property
    def classes(self) -> np.ndarray:
        if not self.is_trained():
            return np.array([], dtype=np.int32)
        return self.model.classes_

    def _check_input(self, data: np.ndarray) -> np.ndarray:
        if not self.is_trained():
            raise ModelError(ErrorKind.NOT_TRAINED, "Classifier hasn't been trained yet")

        data = np.asarray(data, dtype=np.float32)
        if data.ndim == 1:
            data = data.reshape(1, -1)
        if data.shape[1] != self._n_features:
            raise DataError(
                ErrorKind.FEATURE_COUNT_MISMATCH,
                f"Model expects {self._n_features} feature(s), got {data.shape[1]}"
            )
        return data

    def predict(self, row: np.ndarray) -> int:
        """Przewiduje klase jednej probki (F,)"""
        row = self._check_input(row)
        if row.shape[0] != 1:
            raise ValueError(f"predict() expects a single sample, got {row.shape[0]}")
        return int(self.model.predict(row)[0])

    def predict_many(self, data: np.ndarray) -> np.ndarray:
        """Przewiduje klasy (N, F) -> (N,)"""
        data = self._check_input(data)
        if data.shape[0] == 0:
            return np.array([], dtype=np.int32)
        return self.model.predict(data).astype(np.int32)

    def predict_proba(self, data: np.ndarray) -> np.ndarray:
        """Prawdopodobienstwa klas (kolejnosc jak w classes)"""
        data = self._check_input(data)
        return self.model.predict_proba(data)

    def feature_importance(self) -> Optional[np.ndarray]:
        if self._feature_importance is None:
            return None
        return self._feature_importance.copy()

    def save(self, path: Union[str, Path]) -> Path:
        """
        Zapisuje model do pliku (pickle)

        Bez rozszerzenia w sciezce dokladane jest PERSISTENCE.DEFAULT_SUFFIX.

        Returns:
            sciezka zapisanego pliku

        Raises:
            ModelError(NOT_TRAINED), PersistenceError
        """
        if not self.is_trained():
            raise ModelError(ErrorKind.NOT_TRAINED, "Classifier hasn't been trained, can't save it")

        path = Path(path)
        if not path.suffix:
            path = path.with_suffix(PERSISTENCE.DEFAULT_SUFFIX)
        payload: Dict[str, Any] = {
            'format': _FORMAT_TAG,
            'format_version': PERSISTENCE.FORMAT_VERSION,
            'model': self.model,
            'n_features': self._n_features,
            'feature_importance': self._feature_importance,
            'params': asdict(self.params) if self.params is not None else None
        }

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'wb') as f:
                pickle.dump(payload, f)
        except OSError as e:
            raise PersistenceError(f"Can't write classifier file '{path}': {e}") from e

        logger.info(f"Classifier file saved to: {path}")
        return path

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'RandomTreesModel':
        """
        Wczytuje model z pliku

        Raises:
            PersistenceError: plik nie istnieje / nie da sie go odczytac
            ModelError(RESTORE_FAILED): zawartosc nie jest zapisanym modelem
        """
        path = Path(path)
        try:
            with open(path, 'rb') as f:
                payload = pickle.load(f)
        except OSError as e:
            raise PersistenceError(f"Can't read classifier file '{path}': {e}") from e
        except (pickle.UnpicklingError, EOFError, AttributeError, ImportError,
                IndexError, TypeError, ValueError) as e:
            raise ModelError(ErrorKind.RESTORE_FAILED, f"Invalid classifier file '{path}': {e}") from e

        if not isinstance(payload, dict) or payload.get('format') != _FORMAT_TAG:
            raise ModelError(ErrorKind.RESTORE_FAILED, f"'{path}' is not a classifier file")
        if payload.get('format_version', 0) > PERSISTENCE.FORMAT_VERSION:
            raise ModelError(
                ErrorKind.RESTORE_FAILED,
                f"Classifier file '{path}' has unsupported format version {payload['format_version']}"
            )

        forest = payload.get('model')
        if forest is not None and not isinstance(forest, RandomForestClassifier):
            raise ModelError(
                ErrorKind.RESTORE_FAILED,
                f"Classifier file '{path}' contains {type(forest).__name__}, not a random forest"
            )

        instance = cls()
        instance.model = forest
        instance._n_features = int(payload.get('n_features') or 0)
        instance._feature_importance = payload.get('feature_importance')
        if payload.get('params'):
            try:
                instance.params = RandomTreesParams(**payload['params'])
            except (TypeError, ValueError) as e:
                raise ModelError(
                    ErrorKind.RESTORE_FAILED,
                    f"Classifier file '{path}' has invalid parameters: {e}"
                ) from e

        logger.info(f"Classifier loaded from {path}")
        return instance
