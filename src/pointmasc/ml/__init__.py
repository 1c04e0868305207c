"""
ML Module - trening i ewaluacja klasyfikatora chmur punktow

Zawiera:
- Model Random Forest za waskim interfejsem (model.py)
- Workflow treningu (training.py)
- Workflow ewaluacji (evaluation.py)
- Klasyfikator - wlasciciel modelu (classifier.py)
- Wykonywanie w tle z postepem (background.py)
"""

from .model import (
    RandomTreesParams,
    TrainableModel,
    RandomTreesModel
)

from .background import (
    CancelToken,
    run_supervised
)

from .training import (
    TrainingWorkflow,
    TrainingState,
    TrainingReport
)

from .evaluation import (
    EvaluationWorkflow,
    AccuracyMetrics
)

from .classifier import Classifier

__all__ = [
    # Model
    'RandomTreesParams',
    'TrainableModel',
    'RandomTreesModel',

    # Background
    'CancelToken',
    'run_supervised',

    # Training
    'TrainingWorkflow',
    'TrainingState',
    'TrainingReport',

    # Evaluation
    'EvaluationWorkflow',
    'AccuracyMetrics',

    # Classifier
    'Classifier',
]
