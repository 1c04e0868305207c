"""
Chmura punktow jako zrodlo danych dla klasyfikatora

PointCloud przechowuje w pamieci:
- coords: (N, 3) wspolrzedne XYZ
- colors: (N, 3) kolory RGB lub None
- pola skalarne: uporzadkowana lista (nazwa, wartosci)
- nazwane podzbiory indeksow

Wczytywanie z plikow nie jest czescia pakietu - chmure buduje aplikacja.
"""

import numpy as np
from typing import Dict, List, Optional, Sequence, Tuple
import logging

from ..errors import ConfigurationError, ErrorKind

logger = logging.getLogger(__name__)


class PointCloud:
    """
    Chmura punktow z polami skalarnymi

    Usage:
        cloud = PointCloud(coords, colors=rgb, name="train")
        cloud.add_scalar_field("Classification", labels)
        subset = cloud.add_subset("test", test_indices)
    """

    def __init__(
        self,
        coords: np.ndarray,
        colors: Optional[np.ndarray] = None,
        scalar_fields: Optional[Dict[str, np.ndarray]] = None,
        name: str = "cloud"
    ):
        """
        Args:
            coords: (N, 3) wspolrzedne
            colors: (N, 3) kolory RGB (np. 0-255) lub None
            scalar_fields: slownik nazwa -> (N,) wartosci
            name: nazwa chmury (do komunikatow)
        """
        coords = np.asarray(coords, dtype=np.float64)
        if coords.ndim != 2 or coords.shape[1] != 3:
            raise ValueError(f"coords must have shape (N, 3), got {coords.shape}")

        if colors is not None:
            colors = np.asarray(colors, dtype=np.float64)
            if colors.shape != coords.shape:
                raise ValueError(
                    f"colors must have shape {coords.shape}, got {colors.shape}"
                )

        self.name = name
        self.coords = coords
        self.colors = colors
        self._scalar_fields: List[Tuple[str, np.ndarray]] = []
        self._subsets: Dict[str, 'IndexSubset'] = {}

        for sf_name, values in (scalar_fields or {}).items():
            self.add_scalar_field(sf_name, values)

        logger.debug(f"PointCloud '{name}': {self.size:,} points, "
                     f"{len(self._scalar_fields)} scalar field(s)")

    @property
    def size(self) -> int:
        return len(self.coords)

    def __len__(self) -> int:
        return self.size

    def __repr__(self) -> str:
        return f"PointCloud(name={self.name!r}, size={self.size})"

    def has_colors(self) -> bool:
        return self.colors is not None

    @property
    def scalar_field_names(self) -> List[str]:
        return [sf_name for sf_name, _ in self._scalar_fields]

    def add_scalar_field(self, name: str, values: Sequence[float]) -> int:
        """
        Dodaje (lub zastepuje) pole skalarne

        Wartosci sa przechowywane jako float32. Pole moze byc krotsze niz
        chmura - walidacja dlugosci nalezy do konsumenta.

        Returns:
            indeks pola
        """
        values = np.asarray(values, dtype=np.float32)
        if values.ndim != 1:
            raise ValueError(f"Scalar field '{name}' must be 1-D, got shape {values.shape}")

        index = self.get_scalar_field_index_by_name(name)
        if index is not None:
            self._scalar_fields[index] = (name, values)
            return index

        self._scalar_fields.append((name, values))
        return len(self._scalar_fields) - 1

    def get_scalar_field_index_by_name(self, name: str) -> Optional[int]:
        """Zwraca indeks pola o dokladnie tej nazwie albo None"""
        for index, (sf_name, _) in enumerate(self._scalar_fields):
            if sf_name == name:
                return index
        return None

    def get_scalar_field(self, index: int) -> np.ndarray:
        return self._scalar_fields[index][1]

    def subset(self, indices: Sequence[int]) -> 'IndexSubset':
        """Tworzy nienazwany podzbior tej chmury"""
        return IndexSubset(self, indices)

    def add_subset(self, name: str, indices: Sequence[int]) -> 'IndexSubset':
        """Tworzy i zapamietuje nazwany podzbior"""
        subset = IndexSubset(self, indices)
        self._subsets[name] = subset
        return subset

    def get_subset(self, name: str) -> 'IndexSubset':
        if name not in self._subsets:
            raise ConfigurationError(
                ErrorKind.MISSING_SUBSET,
                f"Cloud '{self.name}' has no subset named '{name}' "
                f"(available: {sorted(self._subsets) or 'none'})"
            )
        return self._subsets[name]

    @property
    def subset_names(self) -> List[str]:
        return list(self._subsets)


class IndexSubset:
    """
    Uporzadkowany wybor punktow jednej chmury

    Wiersz i zbioru danych odpowiada punktowi o globalnym indeksie
    get_point_global_index(i).
    """

    def __init__(self, cloud: PointCloud, indices: Sequence[int]):
        indices = np.asarray(indices)
        if indices.size == 0:
            indices = indices.astype(np.int64).reshape(0)

        if indices.ndim != 1:
            raise ConfigurationError(
                ErrorKind.INVALID_SUBSET,
                f"Subset indices must be 1-D, got shape {indices.shape}"
            )
        if not np.issubdtype(indices.dtype, np.integer):
            raise ConfigurationError(
                ErrorKind.INVALID_SUBSET,
                f"Subset indices must be integers, got {indices.dtype}"
            )
        if indices.size and (indices.min() < 0 or indices.max() >= cloud.size):
            raise ConfigurationError(
                ErrorKind.INVALID_SUBSET,
                f"Subset indices out of range for cloud '{cloud.name}' "
                f"({cloud.size} points): [{indices.min()}, {indices.max()}]"
            )

        self.cloud = cloud
        self.indices = indices.astype(np.int64)
        self.indices.setflags(write=False)

    @property
    def size(self) -> int:
        return len(self.indices)

    def __len__(self) -> int:
        return self.size

    def __repr__(self) -> str:
        return f"IndexSubset(cloud={self.cloud.name!r}, size={self.size})"

    def get_point_global_index(self, i: int) -> int:
        return int(self.indices[i])


def row_point_indices(cloud: PointCloud, subset: Optional[IndexSubset] = None) -> np.ndarray:
    """
    Mapowanie wiersz -> globalny indeks punktu

    Bez podzbioru: identycznosc (0..N-1). Z podzbiorem: subset.indices.
    """
    if subset is None:
        return np.arange(cloud.size, dtype=np.int64)
    return subset.indices
