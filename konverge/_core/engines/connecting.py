import contextlib
import logging
from typing import AsyncIterator, Optional

from konverge._cogs.clients import auth
from konverge._cogs.configs import configuration
from konverge._cogs.helpers import typedefs
from konverge._cogs.structs import credentials
from konverge._core.intents import piggybacking

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def connected(
        info: Optional[credentials.ConnectionInfo] = None,
        *,
        settings: Optional[configuration.Settings] = None,
        logger: typedefs.Logger = logger,
) -> AsyncIterator[auth.APIContext]:
    """
    Connect to the cluster for the duration of the block.

    All the helpers & checks within the block use this connection & settings
    implicitly. If no credentials are given, they are detected
    (see :func:`konverge._core.intents.piggybacking.login`)::

        async with konverge.connected():
            await konverge.validate_deployment(deployment)
    """
    if info is None:
        info = piggybacking.login(logger=logger)
    context = auth.APIContext(info)
    context_token = auth.context_var.set(context)
    settings_token = configuration.settings_var.set(settings if settings is not None else
                                                    configuration.Settings())
    try:
        yield context
    finally:
        configuration.settings_var.reset(settings_token)
        auth.context_var.reset(context_token)
        await context.close()
