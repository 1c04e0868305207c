"""
Zrodla wartosci cech

ValueSource to wariant z tagiem (SourceKind) zwiazany raz z tablica danych
chmury. Odczyt nie wyszukuje ponownie pola - dispatch po tagu, nie po klasie.
"""

import numpy as np
from dataclasses import dataclass
import logging

from ..core.point_cloud import PointCloud
from ..errors import DataError, ErrorKind
from .descriptor import FeatureDescriptor, SourceKind

logger = logging.getLogger(__name__)

_AXIS_COLUMN = {SourceKind.DIM_X: 0, SourceKind.DIM_Y: 1, SourceKind.DIM_Z: 2}
_CHANNEL_COLUMN = {SourceKind.RED: 0, SourceKind.GREEN: 1, SourceKind.BLUE: 2}


@dataclass(frozen=True, eq=False)
class ValueSource:
    """Rozwiazane zrodlo wartosci dla jednej cechy"""
    kind: SourceKind
    values: np.ndarray  # widok na dane chmury (pole, kolumna XYZ lub RGB)
    name: str

    def value_at(self, point_index: int) -> float:
        if self.kind is SourceKind.SCALAR_FIELD:
            return float(self.values[point_index])
        if self.kind.is_coordinate:
            return float(self.values[point_index, _AXIS_COLUMN[self.kind]])
        return float(self.values[point_index, _CHANNEL_COLUMN[self.kind]])

    def values_at(self, point_indices: np.ndarray) -> np.ndarray:
        """Wektorowy odczyt wielu punktow"""
        if self.kind is SourceKind.SCALAR_FIELD:
            return self.values[point_indices]
        if self.kind.is_coordinate:
            return self.values[point_indices, _AXIS_COLUMN[self.kind]]
        return self.values[point_indices, _CHANNEL_COLUMN[self.kind]]


def resolve_source(feature: FeatureDescriptor, cloud: PointCloud) -> ValueSource:
    """
    Wiaze deskryptor cechy z danymi chmury

    Raises:
        DataError(UNKNOWN_ATTRIBUTE): brak pola skalarnego o tej nazwie
        DataError(MISSING_CAPABILITY): kanal koloru w chmurze bez kolorow
    """
    kind = feature.source

    if kind is SourceKind.SCALAR_FIELD:
        sf_index = cloud.get_scalar_field_index_by_name(feature.source_name)
        if sf_index is None:
            raise DataError(
                ErrorKind.UNKNOWN_ATTRIBUTE,
                f"Unknown scalar field '{feature.source_name}' on cloud '{cloud.name}' "
                f"(available: {', '.join(cloud.scalar_field_names) or 'none'})"
            )
        values = cloud.get_scalar_field(sf_index)
        if len(values) < cloud.size:
            raise DataError(
                ErrorKind.TRUNCATED_ATTRIBUTE,
                f"Scalar field '{feature.source_name}' is incomplete: "
                f"expected {cloud.size} values, found {len(values)}"
            )
        return ValueSource(kind, values, feature.source_name)

    if kind.is_coordinate:
        return ValueSource(kind, cloud.coords, feature.column_name)

    if not cloud.has_colors():
        raise DataError(
            ErrorKind.MISSING_CAPABILITY,
            f"Feature '{feature.column_name}' requires colors but cloud '{cloud.name}' has none"
        )
    return ValueSource(kind, cloud.colors, feature.column_name)
