"""
Resolve the entity upserter named by ENTITY_UPSERTER
"""

import importlib
from typing import Optional

from shopwoo.core.exceptions import UpserterNotConfiguredError
from shopwoo.core.logging import get_logger
from ..interfaces.entity_upserter import IEntityUpserter

logger = get_logger(__name__)


def load_upserter(dotted_path: Optional[str]) -> Optional[IEntityUpserter]:
    """
    Instantiate `package.module:ClassName` (or `package.module.ClassName`).

    Returns None for an empty path. Raises UpserterNotConfiguredError when
    the path cannot be imported or does not name an IEntityUpserter.
    """
    if not dotted_path or not dotted_path.strip():
        logger.warning("No entity upserter configured; imports cannot run")
        return None

    path = dotted_path.strip()
    if ":" in path:
        module_name, _, attr = path.partition(":")
    else:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise UpserterNotConfiguredError(dotted_path=path)

    try:
        module = importlib.import_module(module_name)
        factory = getattr(module, attr)
    except (ImportError, AttributeError) as e:
        logger.error("Could not load entity upserter", path=path, error=str(e))
        raise UpserterNotConfiguredError(dotted_path=path, cause=e)

    upserter = factory() if isinstance(factory, type) else factory
    if not isinstance(upserter, IEntityUpserter):
        raise UpserterNotConfiguredError(dotted_path=path)

    logger.info("Entity upserter loaded", path=path)
    return upserter
