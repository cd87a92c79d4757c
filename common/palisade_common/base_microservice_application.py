"""
Copyright (C) 2026  Palisade Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Palisade. See the LICENSE file in the project
root for full license details.
"""
import abc
import asyncio
import logging
import typing


class BaseMicroserviceApplication(abc.ABC):
    """ Base microservice class. """
    __slots__ = ["_is_initialised", "_logger", "_main_loop_interval",
                 "_shutdown_complete", "_shutdown_event"]

    def __init__(self, main_loop_interval: float = 0.1):
        self._is_initialised: bool = False
        self._logger: typing.Optional[logging.Logger] = None
        self._main_loop_interval: float = main_loop_interval
        self._shutdown_event: asyncio.Event = asyncio.Event()
        self._shutdown_complete: asyncio.Event = asyncio.Event()

    @property
    def logger(self) -> logging.Logger:
        """
        Property getter for logger instance.

        returns:
            Returns the logger instance.
        """
        return self._logger

    @logger.setter
    def logger(self, logger: logging.Logger) -> None:
        """
        Property setter for logger instance.

        parameters:
            logger (logging.Logger) : Logger instance.
        """
        self._logger = logger

    @property
    def is_initialised(self) -> bool:
        """ True once ``initialise`` has completed successfully. """
        return self._is_initialised

    @property
    def shutdown_event(self) -> asyncio.Event:
        """
        Event used to signal the shutdown of the service.

        Background tasks await or poll this event so that they stop once the
        service is being shut down.
        """
        return self._shutdown_event

    @property
    def shutdown_complete(self) -> asyncio.Event:
        """
        Event that is set once the shutdown logic of the service has run.
        """
        return self._shutdown_complete

    async def initialise(self) -> bool:
        """
        Microservice initialisation.  It should return a boolean
        (True => Successful, False => Unsuccessful), upon success
        self._is_initialised is set to True.

        Returns:
            Boolean: True => Successful, False => Unsuccessful.
        """
        if await self._initialise() is True:
            self._is_initialised = True
            return True

        await self.stop()

        return False

    async def run(self) -> None:
        """
        Run the main loop of the microservice until shutdown is signalled.
        """

        if not self._is_initialised:
            self._logger.warning("Microservice is not initialised. "
                                 "Exiting run loop.")
            return

        self._logger.info("Microservice starting main loop.")

        try:
            while not self._shutdown_event.is_set():
                await self._main_loop()
                await asyncio.sleep(self._main_loop_interval)

        except asyncio.CancelledError:
            self._logger.debug("Service: Cancellation received.")
            raise

        finally:
            self._logger.info("Exiting microservice run loop...")
            await self.stop()

    async def stop(self) -> None:
        """
        Stop the microservice. The shutdown logic only runs once, later calls
        return straight away.
        """
        if self._shutdown_complete.is_set():
            return

        self._logger.info("Stopping microservice...")
        self._shutdown_event.set()

        await self._shutdown()
        self._shutdown_complete.set()

        self._logger.info("Microservice shutdown complete...")

    async def _initialise(self) -> bool:
        """
        Microservice initialisation.  It should return a boolean
        (True => Successful, False => Unsuccessful).

        Returns:
            Boolean: True => Successful, False => Unsuccessful.
        """
        return True

    @abc.abstractmethod
    async def _main_loop(self) -> None:
        """ Abstract method for main microservice loop. """

    @abc.abstractmethod
    async def _shutdown(self):
        """ Abstract method for microservice shutdown. """
