"""
Moduly cech i budowy zbioru danych

- FeatureDescriptor: opis jednej cechy (zrodlo, kategoria, chmura)
- ValueSource: rozwiazane zrodlo wartosci cechy
- DatasetBuilder: macierz cech (N, F) + etykiety
"""

from .descriptor import FeatureDescriptor, FeatureSet, FeatureType, SourceKind
from .value_source import ValueSource, resolve_source
from .dataset import Dataset, DatasetBuilder, find_ground_truth

__all__ = [
    'FeatureDescriptor',
    'FeatureSet',
    'FeatureType',
    'SourceKind',
    'ValueSource',
    'resolve_source',
    'Dataset',
    'DatasetBuilder',
    'find_ground_truth'
]
