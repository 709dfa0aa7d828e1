"""Limpieza del almacén temporal al arrancar, al apagar y ante fallos del proceso."""

from __future__ import annotations

import logging
import os
import signal
import sys
import threading
from typing import Any, Callable

from csv_service.services.interfaces import TempStoreProtocol

logger = logging.getLogger(__name__)


class LifecycleManager:
    def __init__(
        self,
        store: TempStoreProtocol,
        *,
        grace_period: float,
        crash_exit_delay: float,
        exit_func: Callable[[int], Any] = os._exit,
    ):
        """
        Args:
            store (TempStoreProtocol): Almacén que se purga en cada transición.
            grace_period (float): Segundos que se esperan a las peticiones en curso al apagar.
            crash_exit_delay (float): Segundos antes de salir tras un error no controlado.
            exit_func (Callable[[int], Any]): Termina el proceso con el código indicado.
        """
        self.store = store
        self.grace_period = grace_period
        self.crash_exit_delay = crash_exit_delay
        self.exit_func = exit_func
        self.crash_timer: threading.Timer | None = None
        self.shutdown_timer: threading.Timer | None = None

    def startup(self) -> list[str]:
        self.store.ensure_directory()
        return self.store.purge()

    def shutdown(self) -> list[str]:
        removed = self.store.purge()
        self.cancel_forced_shutdown()
        logger.info("Server shut down successfully")
        return removed

    def begin_shutdown(self, sig: int) -> None:
        """Purga el almacén y arma el temporizador que fuerza la salida si las peticiones no terminan a tiempo."""
        if self.shutdown_timer is not None:
            return
        logger.info("Received %s. Cleaning up and shutting down...", _signal_name(sig))
        self.store.purge()
        self.shutdown_timer = threading.Timer(self.grace_period, self._force_exit)
        self.shutdown_timer.daemon = True
        self.shutdown_timer.start()

    def cancel_forced_shutdown(self) -> None:
        if self.shutdown_timer is not None:
            self.shutdown_timer.cancel()

    def _force_exit(self) -> None:
        logger.error("Forced shutdown due to timeout")
        self.exit_func(1)

    def handle_uncaught(self, exc_type, exc, tb) -> None:
        logger.critical("Uncaught Exception", exc_info=(exc_type, exc, tb))
        self.store.purge()
        if self.crash_timer is None:
            # no daemon: el intérprete espera al temporizador antes de terminar
            self.crash_timer = threading.Timer(self.crash_exit_delay, self.exit_func, args=(1,))
            self.crash_timer.start()

    def handle_thread_exception(self, args: threading.ExceptHookArgs) -> None:
        if args.exc_type is SystemExit:
            return
        self.handle_uncaught(args.exc_type, args.exc_value, args.exc_traceback)

    def handle_async_error(self, loop, context: dict[str, Any]) -> None:
        exc = context.get("exception")
        logger.error("Unhandled async error: %s", context.get("message", "sin mensaje"), exc_info=exc)

    def install_hooks(self) -> None:
        sys.excepthook = self.handle_uncaught
        threading.excepthook = self.handle_thread_exception


def _signal_name(sig: int) -> str:
    try:
        return signal.Signals(sig).name
    except ValueError:
        return str(sig)
