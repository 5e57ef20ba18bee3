"""
Container drivers: shared dispatch.

A container driver materializes a local file (by decompressing, fetching
or simply locating it), detects its type, asks the DriverManager for the
driver that claims that type and connects it to:

    <inner identifier>://<local path>?<original query parameters>

The returned StagedConnection forwards everything to the inner connection,
reports the caller's URL (plus any default parameter the inner driver
added, e.g. ``separator=%2C``) and removes the staging directory on close.
"""

import logging
from typing import Awaitable, Callable, Optional

from multisql.core.logging import mask_url
from multisql.drivers.base import Connection, DelegatingConnection, Driver
from multisql.drivers.file_type import detect
from multisql.drivers.manager import DriverManager
from multisql.drivers.temp import StagingDirectory
from multisql.drivers.url import DriverUrl, add_params, file_url, missing_params
from multisql.errors import DriverNotFound, InvalidUrl

logger = logging.getLogger(__name__)

# Called with the inner connection before it is wrapped
Setup = Callable[[Connection], Awaitable[None]]


class StagedConnection(DelegatingConnection):
    """Inner connection plus the staging directory it reads from."""

    def __init__(self, url: str, inner: Connection, staging: Optional[StagingDirectory] = None):
        super().__init__(url, inner)
        self.staging = staging

    @property
    def staging_path(self) -> Optional[str]:
        return self.staging.path if self.staging else None

    async def _close(self) -> None:
        try:
            await self.inner.close()
        finally:
            if self.staging is not None:
                self.staging.cleanup()


class ContainerDriver(Driver):
    """
    Base class for drivers that re-dispatch to the driver of an inner file.

    Subclasses materialize the file and call dispatch().
    """

    def __init__(self, manager: Optional[DriverManager] = None):
        self._manager = manager

    @property
    def manager(self) -> DriverManager:
        return self._manager or DriverManager.default()

    async def dispatch(
        self,
        url: str,
        path: str,
        password: Optional[str] = None,
        staging: Optional[StagingDirectory] = None,
        media_type: Optional[str] = None,
        setup: Optional[Setup] = None,
    ) -> Connection:
        """
        Connect the driver claiming the file at ``path`` and wrap it.

        The staging directory is removed if anything fails.
        """
        try:
            file_type = detect(path, media_type)
            driver = self.manager.get_by_file_type(file_type)
            if driver is None:
                raise DriverNotFound(f"{file_type.name} ({path})")
            if driver.identifier() == self.identifier():
                raise InvalidUrl(
                    f"Refusing to re-dispatch {mask_url(url)} to the {self.identifier()} driver"
                )

            inner_url = file_url(driver.identifier(), path, DriverUrl(url).query)
            logger.debug(f"Dispatching {mask_url(url)} to {driver.identifier()}: {inner_url}")
            inner = await driver.connect(inner_url, password)
            try:
                if setup is not None:
                    await setup(inner)
            except BaseException:
                await inner.close()
                raise
        except BaseException:
            if staging is not None:
                staging.cleanup()
            raise

        outer_url = add_params(url, missing_params(url, inner.url()))
        return StagedConnection(outer_url, inner, staging)
