"""
Wykonywanie dlugich operacji w tle z raportowaniem postepu

Operacja (np. trening lasu) dziala na watku roboczym, a watek wywolujacy
odpytuje o zakonczenie i wysyla "heartbeat" do progress_callback.
Anulowanie jest best-effort: nadzorca przestaje czekac i odrzuca wynik,
sama operacja nie jest przerywana.
"""

import concurrent.futures
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional, TypeVar
import threading
import time
import logging

from ..config import PROGRESS
from ..errors import ErrorKind, ModelError

logger = logging.getLogger(__name__)

T = TypeVar('T')

# callback(step, pct, msg); pct = -1 dla postepu nieokreslonego
ProgressCallback = Callable[[str, int, str], None]


class CancelToken:
    """Flaga anulowania wspoldzielona z nadzorca"""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def run_supervised(
    task: Callable[[], T],
    step: str,
    progress_callback: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancelToken] = None,
    poll_interval: float = PROGRESS.POLL_INTERVAL,
    heartbeat_interval: float = PROGRESS.HEARTBEAT_INTERVAL
) -> T:
    """
    Uruchamia task na watku roboczym i czeka na wynik

    Args:
        task: funkcja bez argumentow
        step: nazwa kroku (do postepu i logow)
        progress_callback: callback(step, pct, msg)
        cancel_token: opcjonalny token anulowania
        poll_interval: co ile sekund sprawdzac zakonczenie
        heartbeat_interval: co ile sekund raportowac postep

    Returns:
        wynik task()

    Raises:
        ModelError(CANCELLED): anulowano przed zakonczeniem
        wyjatek rzucony przez task
    """
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pointmasc")
    try:
        future = executor.submit(task)
        start_time = time.time()
        last_beat = start_time

        while True:
            try:
                return future.result(timeout=poll_interval)
            except concurrent.futures.TimeoutError:
                pass

            if cancel_token is not None and cancel_token.cancelled:
                future.cancel()
                logger.warning(f"{step} cancelled, result will be discarded")
                raise ModelError(ErrorKind.CANCELLED, f"{step} cancelled by user")

            now = time.time()
            if progress_callback and now - last_beat >= heartbeat_interval:
                progress_callback(step, -1, f"{step}... ({now - start_time:.0f}s)")
                last_beat = now
    finally:
        executor.shutdown(wait=False)
