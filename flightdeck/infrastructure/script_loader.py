"""
Flightplan Script Loader

Architectural Intent:
- Loads a user flightplan (a plain Python file) as a module
- The script declares a `configure(plan)` function receiving the
  orchestrator; flights and targets are registered there
"""

import importlib.util
import logging
from pathlib import Path
from typing import Any, Union
from flightdeck.domain.errors import InvalidArgumentError

logger = logging.getLogger(__name__)

ENTRY_POINT = "configure"


def load_flightplan(path: Union[str, Path], plan: Any) -> Any:
    """Import the script at `path` and hand `plan` to its configure()."""
    path = Path(path)
    if not path.is_file():
        raise InvalidArgumentError(f"Unable to load {path}")

    spec = importlib.util.spec_from_file_location("flightplan", path)
    if spec is None or spec.loader is None:
        raise InvalidArgumentError(f"Unable to load {path}")

    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    configure = getattr(module, ENTRY_POINT, None)
    if not callable(configure):
        raise InvalidArgumentError(
            f"{path} does not define a {ENTRY_POINT}(plan) function"
        )

    logger.debug("Loading flightplan %s", path)
    configure(plan)
    return module
