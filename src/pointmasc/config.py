"""
Centralna konfiguracja klasyfikatora pointmasc

Wszystkie stale i domyslne parametry w jednym miejscu dla latwej modyfikacji.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldConfig:
    """Zarezerwowane nazwy pol skalarnych"""
    CLASSIFICATION: str = "Classification"  # pole z etykietami ground truth


@dataclass(frozen=True)
class RandomTreesDefaults:
    """Domyslne hiperparametry lasu losowego"""
    MAX_DEPTH: int = 25
    MIN_SAMPLE_COUNT: int = 10
    MAX_TREE_COUNT: int = 100
    CONVERGENCE_TOLERANCE: float = 0.0  # 0 = tylko limit liczby drzew
    COMPUTE_VARIABLE_IMPORTANCE: bool = True
    ACTIVE_VAR_COUNT: int = 0  # 0 = sqrt(liczba cech)
    TREE_GROWTH_STEP: int = 10
    RANDOM_STATE: int = 42
    N_JOBS: int = -1


@dataclass(frozen=True)
class ProgressConfig:
    """Konfiguracja raportowania postepu"""
    POLL_INTERVAL: float = 0.1  # sekundy
    HEARTBEAT_INTERVAL: float = 1.0  # sekundy


@dataclass(frozen=True)
class PersistenceConfig:
    """Konfiguracja zapisu modelu"""
    FORMAT_VERSION: int = 1
    DEFAULT_SUFFIX: str = ".pkl"


# Singleton instances
FIELDS = FieldConfig()
RANDOM_TREES = RandomTreesDefaults()
PROGRESS = ProgressConfig()
PERSISTENCE = PersistenceConfig()
