"""
Training Workflow - trening klasyfikatora na cechach chmury punktow

Kroki: walidacja -> budowa zbioru danych (z etykietami) -> trening -> kontrola.
Bledy walidacji i danych nie ruszaja poprzedniego modelu. Nieudany trening
zostawia klasyfikator niewytrenowany.
"""

import numpy as np
from typing import TYPE_CHECKING, Dict, List, Optional
from dataclasses import dataclass
from enum import Enum
import time
import logging

from ..core.point_cloud import IndexSubset
from ..errors import (
    ConfigurationError, ErrorKind, InternalError, MascError, ModelError, OperationResult
)
from ..features.dataset import DatasetBuilder
from ..features.descriptor import FeatureSet
from .background import CancelToken, ProgressCallback, run_supervised
from .model import RandomTreesParams

if TYPE_CHECKING:
    from .classifier import Classifier

logger = logging.getLogger(__name__)


class TrainingState(Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    BUILDING_DATASET = "building_dataset"
    TRAINING = "training"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class TrainingReport:
    """Podsumowanie udanego treningu"""
    n_samples: int
    n_features: int
    n_classes: int
    feature_names: List[str]
    class_distribution: Dict[int, int]
    training_time: float


class TrainingWorkflow:
    """
    Workflow treningu

    Usage:
        workflow = TrainingWorkflow()
        result = workflow.run(classifier, features, RandomTreesParams())
        if not result:
            print(result.kind, result.message)
    """

    def __init__(self, builder: Optional[DatasetBuilder] = None, background: bool = False):
        """
        Args:
            builder: budowniczy zbioru danych
            background: trening na watku roboczym (z heartbeat postepu)
        """
        self.builder = builder or DatasetBuilder()
        self.background = background
        self.state = TrainingState.IDLE
        self.report: Optional[TrainingReport] = None

    def run(
        self,
        classifier: 'Classifier',
        features: FeatureSet,
        params: Optional[RandomTreesParams] = None,
        subset: Optional[IndexSubset] = None,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancelToken] = None
    ) -> OperationResult:
        """
        Trenuje model klasyfikatora

        Args:
            classifier: wlasciciel modelu (model jest podmieniany po sukcesie)
            features: lista cech (jedna chmura)
            params: hiperparametry
            subset: opcjonalny podzbior treningowy (domyslnie cala chmura)
            progress_callback: callback(step, pct, msg), tylko informacyjny
            cancel_token: anulowanie (tylko w trybie background)

        Returns:
            OperationResult
        """
        if cancel_token is not None and not self.background:
            logger.warning("Cancel token ignored: training runs in the foreground (background=False)")

        self.report = None
        try:
            self.report = self._train(
                classifier, features, params or RandomTreesParams(),
                subset, progress_callback, cancel_token
            )
        except MascError as e:
            self.state = TrainingState.FAILED
            logger.error(f"Training failed: {e}")
            return OperationResult.failure(e)
        except Exception as e:
            self.state = TrainingState.FAILED
            logger.error(f"Unexpected error during training: {e}", exc_info=True)
            return OperationResult.failure(InternalError(f"Internal error: {e}"))

        self.state = TrainingState.DONE
        self._progress(progress_callback, 100, "Done")
        return OperationResult.ok(
            f"Classifier trained on {self.report.n_samples} samples "
            f"with {self.report.n_features} feature(s)"
        )

    def _train(
        self,
        classifier: 'Classifier',
        features: FeatureSet,
        params: RandomTreesParams,
        subset: Optional[IndexSubset],
        progress_callback: Optional[ProgressCallback],
        cancel_token: Optional[CancelToken]
    ) -> TrainingReport:
        start_time = time.time()

        # 1. Walidacja
        self.state = TrainingState.VALIDATING
        self._progress(progress_callback, 0, "Validating input...")

        if not features:
            raise ConfigurationError(ErrorKind.EMPTY_FEATURE_SET, "Training method called without any feature")

        first = features[0]
        assert first is not None, "first feature is None"
        if first is None:
            raise InternalError("Invalid feature (no associated point cloud)")
        cloud = first.cloud

        if subset is not None and subset.cloud is not cloud:
            raise ConfigurationError(
                ErrorKind.INVALID_SUBSET,
                f"Invalid train subset (associated point cloud '{subset.cloud.name}' "
                f"is different than '{cloud.name}')"
            )

        # 2. Zbior danych
        self.state = TrainingState.BUILDING_DATASET
        self._progress(progress_callback, 10, "Building dataset...")

        dataset = self.builder.build(features, cloud, subset, with_labels=True)
        logger.info(f"Training data: {dataset.n_samples:,} samples with {dataset.n_features} feature(s)")

        # 3. Trening
        self.state = TrainingState.TRAINING
        self._progress(progress_callback, 30, "Training classifier...")

        model = classifier.create_model()
        try:
            if self.background:
                run_supervised(
                    lambda: model.train(dataset.data, dataset.labels, params),
                    "Training",
                    progress_callback,
                    cancel_token
                )
            else:
                model.train(dataset.data, dataset.labels, params)
        except ModelError as e:
            if e.kind is not ErrorKind.CANCELLED:
                classifier.reset()
            raise
        except MascError:
            classifier.reset()
            raise
        except Exception as e:
            classifier.reset()
            raise ModelError(ErrorKind.TRAINING_FAILED, f"Training failed: {e}") from e

        # 4. Kontrola
        if not model.is_trained():
            classifier.reset()
            raise ModelError(ErrorKind.TRAINING_FAILED, "Training failed for an unknown reason...")

        classifier.replace_model(model)

        unique_classes, counts = np.unique(dataset.labels, return_counts=True)
        training_time = time.time() - start_time
        logger.info(f"Training done in {training_time:.2f}s ({len(unique_classes)} classes)")

        return TrainingReport(
            n_samples=dataset.n_samples,
            n_features=dataset.n_features,
            n_classes=len(unique_classes),
            feature_names=dataset.feature_names,
            class_distribution={int(c): int(n) for c, n in zip(unique_classes, counts)},
            training_time=training_time
        )

    @staticmethod
    def _progress(progress_callback: Optional[ProgressCallback], pct: int, msg: str) -> None:
        if progress_callback:
            progress_callback("Training", pct, msg)
