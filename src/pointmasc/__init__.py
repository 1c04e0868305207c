"""
pointmasc - nadzorowana klasyfikacja chmur punktow

Moduly:
- core: chmura punktow i podzbiory
- features: deskryptory cech, zrodla wartosci, budowa zbioru danych
- ml: model Random Forest, workflow treningu i ewaluacji, klasyfikator

Przyklad uzycia:
    from pointmasc import Classifier, FeatureDescriptor, PointCloud

    cloud = PointCloud(coords, colors, {"Classification": labels})
    features = [
        FeatureDescriptor.coordinate(cloud, "z"),
        FeatureDescriptor.color(cloud, "red"),
    ]

    clf = Classifier()
    result = clf.train(features)
    metrics, result = clf.evaluate(features, cloud.subset(test_idx))
"""

from .core import PointCloud, IndexSubset
from .errors import (
    ErrorKind,
    MascError,
    ConfigurationError,
    DataError,
    ModelError,
    PersistenceError,
    InternalError,
    OperationResult
)
from .features import (
    FeatureDescriptor,
    FeatureType,
    SourceKind,
    Dataset,
    DatasetBuilder
)
from .ml import (
    Classifier,
    RandomTreesParams,
    RandomTreesModel,
    TrainableModel,
    AccuracyMetrics,
    CancelToken
)

__version__ = "1.0.0"
__all__ = [
    'PointCloud',
    'IndexSubset',
    'ErrorKind',
    'MascError',
    'ConfigurationError',
    'DataError',
    'ModelError',
    'PersistenceError',
    'InternalError',
    'OperationResult',
    'FeatureDescriptor',
    'FeatureType',
    'SourceKind',
    'Dataset',
    'DatasetBuilder',
    'Classifier',
    'RandomTreesParams',
    'RandomTreesModel',
    'TrainableModel',
    'AccuracyMetrics',
    'CancelToken'
]
