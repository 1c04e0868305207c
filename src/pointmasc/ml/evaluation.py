"""
Evaluation Workflow - ocena dokladnosci wytrenowanego klasyfikatora

Ocena zawsze dotyczy jawnego podzbioru testowego z polem ground truth.
"""

import numpy as np
from typing import TYPE_CHECKING, Dict, Optional, Tuple
from dataclasses import dataclass, field
import time
import logging

from sklearn.metrics import accuracy_score

from ..core.point_cloud import IndexSubset
from ..errors import (
    ConfigurationError, DataError, ErrorKind, InternalError, MascError, ModelError, OperationResult
)
from ..features.dataset import DatasetBuilder
from ..features.descriptor import FeatureSet
from .background import ProgressCallback, run_supervised

if TYPE_CHECKING:
    from .classifier import Classifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccuracyMetrics:
    """Metryki dokladnosci"""
    sample_count: int = 0
    correct_count: int = 0
    ratio: float = 0.0
    per_class_accuracy: Dict[int, float] = field(default_factory=dict)

    @classmethod
    def from_predictions(cls, labels: np.ndarray, predictions: np.ndarray) -> 'AccuracyMetrics':
        """Porownuje predykcje z etykietami (dokladna rownosc kodow klas)"""
        labels = np.asarray(labels, dtype=np.int64)
        predictions = np.asarray(predictions, dtype=np.int64)

        sample_count = len(labels)
        if sample_count == 0:
            return cls()

        correct_count = int((labels == predictions).sum())

        per_class_acc = {}
        for cls_id in np.unique(labels):
            mask = labels == cls_id
            per_class_acc[int(cls_id)] = float(accuracy_score(labels[mask], predictions[mask]))

        return cls(
            sample_count=sample_count,
            correct_count=correct_count,
            ratio=correct_count / sample_count,
            per_class_accuracy=per_class_acc
        )


class EvaluationWorkflow:
    """
    Workflow ewaluacji

    Usage:
        workflow = EvaluationWorkflow()
        metrics, result = workflow.run(classifier, features, test_subset)
        print(f"{metrics.ratio:.2%}")
    """

    def __init__(self, builder: Optional[DatasetBuilder] = None, background: bool = False):
        self.builder = builder or DatasetBuilder()
        self.background = background

    def run(
        self,
        classifier: 'Classifier',
        features: FeatureSet,
        subset: Optional[IndexSubset],
        progress_callback: Optional[ProgressCallback] = None
    ) -> Tuple[AccuracyMetrics, OperationResult]:
        """
        Args:
            classifier: wytrenowany klasyfikator
            features: lista cech (te same co przy treningu, ta sama kolejnosc)
            subset: podzbior testowy (obowiazkowy)
            progress_callback: callback(step, pct, msg)

        Returns:
            (AccuracyMetrics, OperationResult)
        """
        try:
            metrics = self._evaluate(classifier, features, subset, progress_callback)
        except MascError as e:
            logger.error(f"Evaluation failed: {e}")
            return AccuracyMetrics(), OperationResult.failure(e)
        except Exception as e:
            logger.error(f"Unexpected error during evaluation: {e}", exc_info=True)
            return AccuracyMetrics(), OperationResult.failure(InternalError(f"Internal error: {e}"))

        warnings = []
        if metrics.sample_count == 0:
            warnings.append("Test subset is empty: accuracy is meaningless")
            logger.warning(warnings[-1])

        if progress_callback:
            progress_callback("Evaluation", 100, "Done")

        return metrics, OperationResult.ok(
            f"Accuracy: {metrics.correct_count}/{metrics.sample_count} ({metrics.ratio:.2%})",
            warnings
        )

    def _evaluate(
        self,
        classifier: 'Classifier',
        features: FeatureSet,
        subset: Optional[IndexSubset],
        progress_callback: Optional[ProgressCallback]
    ) -> AccuracyMetrics:
        if not classifier.is_trained():
            raise ModelError(ErrorKind.NOT_TRAINED, "Classifier hasn't been trained yet")
        if not features:
            raise ConfigurationError(ErrorKind.EMPTY_FEATURE_SET, "Evaluation method called without any feature")
        if subset is None:
            raise ConfigurationError(ErrorKind.MISSING_SUBSET, "No test subset provided")

        if progress_callback:
            progress_callback("Evaluation", 0, "Building dataset...")

        start_time = time.time()
        dataset = self.builder.build(features, subset.cloud, subset, with_labels=True)
        logger.info(f"Testing data: {dataset.n_samples:,} samples with {dataset.n_features} feature(s)")

        model = classifier.model
        if model.n_features is not None and model.n_features != dataset.n_features:
            raise DataError(
                ErrorKind.FEATURE_COUNT_MISMATCH,
                f"Classifier was trained with {model.n_features} feature(s), "
                f"{dataset.n_features} given"
            )

        if progress_callback:
            progress_callback("Evaluation", 50, "Classifying...")

        if dataset.n_samples == 0:
            predictions = np.array([], dtype=np.int32)
        elif self.background:
            predictions = run_supervised(
                lambda: model.predict_many(dataset.data), "Evaluation", progress_callback
            )
        else:
            predictions = model.predict_many(dataset.data)

        metrics = AccuracyMetrics.from_predictions(dataset.labels, predictions)

        elapsed = time.time() - start_time
        logger.info(f"Evaluation: {metrics.correct_count}/{metrics.sample_count} correct "
                    f"({metrics.ratio:.2%}) in {elapsed:.2f}s")
        return metrics
