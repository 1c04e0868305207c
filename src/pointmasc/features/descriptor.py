"""
Deskryptory cech - opis kolumn zbioru danych

FeatureDescriptor nie przechowuje danych. Wskazuje chmure, zrodlo wartosci
(pole skalarne, os XYZ, kanal RGB) i kategorie cechy. Kolejnosc deskryptorow
w FeatureSet = kolejnosc kolumn macierzy cech.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from ..core.point_cloud import PointCloud
from ..errors import ConfigurationError, ErrorKind


class FeatureType(Enum):
    """Kategoria cechy"""
    POINT = "point"  # cechy punktowe (pole skalarne, wspolrzedne, kolor)
    NEIGHBORHOOD = "neighborhood"  # cechy sasiedztwa dla danej skali
    CONTEXT_BASED = "context_based"  # cechy kontekstowe
    DUAL_CLOUD = "dual_cloud"  # cechy wymagajace dwoch chmur


class SourceKind(Enum):
    """Zrodlo wartosci cechy"""
    SCALAR_FIELD = "scalar_field"
    DIM_X = "x"
    DIM_Y = "y"
    DIM_Z = "z"
    RED = "red"
    GREEN = "green"
    BLUE = "blue"

    @property
    def is_coordinate(self) -> bool:
        return self in (SourceKind.DIM_X, SourceKind.DIM_Y, SourceKind.DIM_Z)

    @property
    def is_color(self) -> bool:
        return self in (SourceKind.RED, SourceKind.GREEN, SourceKind.BLUE)


_AXES = {'x': SourceKind.DIM_X, 'y': SourceKind.DIM_Y, 'z': SourceKind.DIM_Z}
_CHANNELS = {
    'r': SourceKind.RED, 'red': SourceKind.RED,
    'g': SourceKind.GREEN, 'green': SourceKind.GREEN,
    'b': SourceKind.BLUE, 'blue': SourceKind.BLUE,
}


@dataclass(frozen=True, eq=False)
class FeatureDescriptor:
    """
    Niemutowalny opis jednej cechy

    Chmura jest pozyczona (nie kopiowana). Rownosc deskryptorow = tozsamosc.
    """
    cloud: PointCloud
    source: SourceKind
    source_name: str = ""  # obowiazkowe dla SCALAR_FIELD
    feature_type: FeatureType = FeatureType.POINT
    scale: Optional[float] = None
    name: Optional[str] = None

    def __post_init__(self):
        if self.cloud is None:
            raise ConfigurationError(ErrorKind.INVALID_FEATURE, "Invalid feature (no associated point cloud)")
        if self.source is SourceKind.SCALAR_FIELD and not self.source_name:
            raise ConfigurationError(
                ErrorKind.INVALID_FEATURE,
                "Invalid feature: a scalar field source requires a source name"
            )

    @property
    def column_name(self) -> str:
        """Nazwa kolumny w zbiorze danych"""
        if self.name:
            return self.name
        if self.source is SourceKind.SCALAR_FIELD:
            return self.source_name
        return self.source.value.upper() if self.source.is_coordinate else self.source.value

    def __str__(self) -> str:
        text = f"{self.column_name} [{self.feature_type.value}"
        if self.scale is not None:
            text += f", scale={self.scale:g}"
        return text + f", cloud={self.cloud.name}]"

    @classmethod
    def scalar_field(
        cls,
        cloud: PointCloud,
        sf_name: str,
        feature_type: FeatureType = FeatureType.POINT,
        scale: Optional[float] = None
    ) -> 'FeatureDescriptor':
        return cls(cloud, SourceKind.SCALAR_FIELD, sf_name, feature_type, scale)

    @classmethod
    def coordinate(cls, cloud: PointCloud, axis: str) -> 'FeatureDescriptor':
        """axis: 'x', 'y' lub 'z'"""
        source = _AXES.get(axis.lower())
        if source is None:
            raise ConfigurationError(ErrorKind.INVALID_FEATURE, f"Unknown coordinate axis '{axis}'")
        return cls(cloud, source, axis.upper())

    @classmethod
    def color(cls, cloud: PointCloud, channel: str) -> 'FeatureDescriptor':
        """channel: 'r'/'red', 'g'/'green' lub 'b'/'blue'"""
        source = _CHANNELS.get(channel.lower())
        if source is None:
            raise ConfigurationError(ErrorKind.INVALID_FEATURE, f"Unknown color channel '{channel}'")
        return cls(cloud, source, source.value)


FeatureSet = Sequence[FeatureDescriptor]
