"""
Moduly podstawowe (core) do obslugi chmur punktow

- PointCloud: chmura z polami skalarnymi i kolorami
- IndexSubset: podzbior punktow jednej chmury
- row_point_indices: mapowanie wiersz -> globalny indeks punktu
"""

from .point_cloud import PointCloud, IndexSubset, row_point_indices

__all__ = [
    'PointCloud',
    'IndexSubset',
    'row_point_indices'
]
