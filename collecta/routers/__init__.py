import importlib
import logging
import pkgutil
from typing import List

from fastapi import FastAPI, APIRouter

logger = logging.getLogger(__name__)


def register_routers(app: FastAPI) -> List[str]:
    """Include the ``router`` of every module in this package, in name order."""
    package = importlib.import_module(__name__)
    registered = []

    for module_info in sorted(pkgutil.iter_modules(package.__path__), key=lambda m: m.name):
        if module_info.ispkg:
            continue

        module = importlib.import_module(f"{__name__}.{module_info.name}")
        router = getattr(module, "router", None)

        if isinstance(router, APIRouter):
            app.include_router(router)
            registered.append(router.prefix)

    logger.debug("Registered routers: %s", ", ".join(registered))
    return registered
