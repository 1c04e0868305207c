"""
Bledy klasyfikatora i wynik operacji

Hierarchia wyjatkow:
- MascError: bazowy wyjatek, zawsze niesie ErrorKind
- ConfigurationError: pusty zestaw cech, brak/niepoprawny podzbior
- DataError: nieznane pole, brak kolorow, brak/uciety ground truth, inne chmury
- ModelError: model nie wytrenowany, nieudany trening, nieudane wczytanie
- PersistenceError: blad zapisu/odczytu pliku modelu
- InternalError: naruszenie niezmiennika (blad programisty)

Na granicy workflow wszystkie sa zamieniane na OperationResult.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class ErrorKind(Enum):
    """Rodzaj bledu (stabilny identyfikator dla warstwy prezentacji)"""
    # Konfiguracja
    EMPTY_FEATURE_SET = "empty_feature_set"
    INVALID_FEATURE = "invalid_feature"
    INVALID_SUBSET = "invalid_subset"
    MISSING_SUBSET = "missing_subset"

    # Dane
    UNKNOWN_ATTRIBUTE = "unknown_attribute"
    TRUNCATED_ATTRIBUTE = "truncated_attribute"
    MISSING_CAPABILITY = "missing_capability"
    MISSING_GROUND_TRUTH = "missing_ground_truth"
    TRUNCATED_GROUND_TRUTH = "truncated_ground_truth"
    INVALID_GROUND_TRUTH = "invalid_ground_truth"
    CLOUD_MISMATCH = "cloud_mismatch"
    SUBSET_MISMATCH = "subset_mismatch"
    FEATURE_COUNT_MISMATCH = "feature_count_mismatch"

    # Model
    NOT_TRAINED = "not_trained"
    TRAINING_FAILED = "training_failed"
    RESTORE_FAILED = "restore_failed"
    CANCELLED = "cancelled"

    # Plik
    IO_ERROR = "io_error"

    # Niezmienniki
    INTERNAL_ERROR = "internal_error"


class MascError(Exception):
    """Bazowy wyjatek klasyfikatora"""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        return self.message


class ConfigurationError(MascError):
    """Niepoprawna konfiguracja wywolania (cechy, podzbiory)"""


class DataError(MascError):
    """Dane chmury nie pasuja do zadanych cech"""


class ModelError(MascError):
    """Blad stanu lub treningu modelu"""


class PersistenceError(MascError):
    """Blad zapisu lub odczytu pliku modelu"""

    def __init__(self, message: str):
        super().__init__(ErrorKind.IO_ERROR, message)


class InternalError(MascError):
    """Naruszenie niezmiennika - blad w kodzie wywolujacym"""

    def __init__(self, message: str):
        super().__init__(ErrorKind.INTERNAL_ERROR, message)


@dataclass(frozen=True)
class OperationResult:
    """
    Wynik operacji na granicy workflow

    success=False zawsze niesie kind i czytelny komunikat.
    warnings zawiera ostrzezenia, ktore nie przerywaja operacji.
    """
    success: bool
    message: str = ""
    kind: Optional[ErrorKind] = None
    warnings: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls, message: str = "", warnings: Optional[List[str]] = None) -> 'OperationResult':
        return cls(success=True, message=message, warnings=list(warnings or []))

    @classmethod
    def failure(cls, error: MascError) -> 'OperationResult':
        return cls(success=False, message=error.message, kind=error.kind)
