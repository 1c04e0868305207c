"""
Budowa zbioru danych - macierz cech (N, F) i wektor etykiet

Kazda kolumna odpowiada jednemu FeatureDescriptor, kazdy wiersz jednemu
punktowi (cala chmura albo podzbior). Budowa jest "wszystko albo nic":
blad dowolnej cechy przerywa budowe i zadna czesciowa macierz nie wychodzi.
"""

import numpy as np
from dataclasses import dataclass
from typing import List, Optional
import logging

from ..config import FIELDS
from ..core.point_cloud import IndexSubset, PointCloud, row_point_indices
from ..errors import ConfigurationError, DataError, ErrorKind, InternalError
from .descriptor import FeatureSet
from .value_source import resolve_source

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Dataset:
    """Zbior danych gotowy dla modelu"""
    data: np.ndarray  # (N, F) float32
    labels: Optional[np.ndarray]  # (N,) int32 lub None
    feature_names: List[str]
    point_indices: np.ndarray  # (N,) globalny indeks punktu dla kazdego wiersza

    @property
    def n_samples(self) -> int:
        return self.data.shape[0]

    @property
    def n_features(self) -> int:
        return self.data.shape[1]


def find_ground_truth(cloud: PointCloud, field_name: str = FIELDS.CLASSIFICATION) -> np.ndarray:
    """
    Zwraca pole ground truth chmury

    Raises:
        DataError(MISSING_GROUND_TRUTH): brak pola
        DataError(TRUNCATED_GROUND_TRUTH): pole krotsze niz chmura
    """
    sf_index = cloud.get_scalar_field_index_by_name(field_name)
    if sf_index is None:
        raise DataError(
            ErrorKind.MISSING_GROUND_TRUTH,
            f"Missing '{field_name}' field on input cloud '{cloud.name}'"
        )

    values = cloud.get_scalar_field(sf_index)
    if len(values) < cloud.size:
        raise DataError(
            ErrorKind.TRUNCATED_GROUND_TRUTH,
            f"Invalid '{field_name}' field on input cloud '{cloud.name}': "
            f"expected {cloud.size} values, found {len(values)}"
        )
    return values


def labels_from_ground_truth(values: np.ndarray, field_name: str = FIELDS.CLASSIFICATION) -> np.ndarray:
    """Zaokragla wartosci pola w strone zera do kodow klas int32"""
    if not np.all(np.isfinite(values)):
        n_bad = int((~np.isfinite(values)).sum())
        raise DataError(
            ErrorKind.INVALID_GROUND_TRUTH,
            f"'{field_name}' field contains {n_bad} non-finite value(s)"
        )

    codes = np.trunc(np.asarray(values, dtype=np.float64))
    bounds = np.iinfo(np.int32)
    out_of_range = (codes < bounds.min) | (codes > bounds.max)
    if out_of_range.any():
        raise DataError(
            ErrorKind.INVALID_GROUND_TRUTH,
            f"'{field_name}' field contains {int(out_of_range.sum())} value(s) outside the int32 class code range"
        )
    return codes.astype(np.int32)


class DatasetBuilder:
    """
    Buduje macierz cech dla listy deskryptorow

    Usage:
        builder = DatasetBuilder()
        dataset = builder.build(features, cloud, subset, with_labels=True)
        X, y = dataset.data, dataset.labels
    """

    def __init__(self, ground_truth_field: str = FIELDS.CLASSIFICATION):
        self.ground_truth_field = ground_truth_field

    def build(
        self,
        features: FeatureSet,
        cloud: PointCloud,
        subset: Optional[IndexSubset] = None,
        with_labels: bool = False
    ) -> Dataset:
        """
        Args:
            features: uporzadkowana lista deskryptorow (kolejnosc = kolumny)
            cloud: chmura, z ktorej czytane sa wartosci
            subset: opcjonalny podzbior wierszy (domyslnie cala chmura)
            with_labels: czy czytac etykiety z pola ground truth

        Returns:
            Dataset

        Raises:
            ConfigurationError, DataError, InternalError
        """
        self._validate(features, cloud, subset)

        ground_truth = None
        if with_labels:
            ground_truth = find_ground_truth(cloud, self.ground_truth_field)

        point_indices = row_point_indices(cloud, subset)
        n_samples = len(point_indices)
        n_features = len(features)

        logger.info(f"Dataset: {n_samples:,} samples with {n_features} feature(s)")

        data = np.empty((n_samples, n_features), dtype=np.float32)

        # Kolumny: kazde zrodlo rozwiazywane raz
        for column, feature in enumerate(features):
            source = resolve_source(feature, cloud)
            data[:, column] = source.values_at(point_indices)

        labels = None
        if ground_truth is not None:
            labels = labels_from_ground_truth(ground_truth[point_indices], self.ground_truth_field)
            labels.setflags(write=False)

        data.setflags(write=False)

        return Dataset(
            data=data,
            labels=labels,
            feature_names=[f.column_name for f in features],
            point_indices=point_indices
        )

    def _validate(
        self,
        features: FeatureSet,
        cloud: PointCloud,
        subset: Optional[IndexSubset]
    ) -> None:
        if not features:
            raise ConfigurationError(ErrorKind.EMPTY_FEATURE_SET, "Dataset requested without any feature")

        for index, feature in enumerate(features):
            assert feature is not None, f"feature #{index} is None"
            if feature is None:
                raise InternalError(f"Internal error: invalid feature #{index} (None)")
            if feature.cloud is not cloud:
                raise DataError(
                    ErrorKind.CLOUD_MISMATCH,
                    f"Invalid feature ({feature}): associated cloud is different "
                    f"than the input cloud '{cloud.name}'"
                )

        if subset is not None and subset.cloud is not cloud:
            raise DataError(
                ErrorKind.SUBSET_MISMATCH,
                f"Invalid subset: associated cloud '{subset.cloud.name}' "
                f"is different than the input cloud '{cloud.name}'"
            )
