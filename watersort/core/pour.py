from __future__ import annotations

import logging

from watersort.core.bottle import Bottle
from watersort.core.config import CAPACITY
from watersort.core.errors import PourInvariantError

logger = logging.getLogger(__name__)


def apply_pour(source: Bottle, target: Bottle, amount: int) -> None:
    """Move the top ``amount`` blocks of ``source`` onto ``target``, keeping their order.

    ``amount`` must come from ``rules.pour_amount`` on the same, unmodified
    bottles. Anything else is a broken caller and raises PourInvariantError.
    """
    if source is target:
        raise PourInvariantError(f"bottle {source.id} cannot pour into itself")
    if amount < 1 or amount > len(source.blocks) or amount > CAPACITY - len(target.blocks):
        raise PourInvariantError(
            f"pour of {amount} from bottle {source.id} ({len(source.blocks)} blocks) "
            f"to bottle {target.id} ({len(target.blocks)} blocks) breaks capacity"
        )
    moved = source.blocks[-amount:]
    if len(set(moved)) != 1:
        raise PourInvariantError(f"pour of {amount} from bottle {source.id} would split colors {moved}")
    del source.blocks[-amount:]
    target.blocks.extend(moved)
    logger.debug("Poured %d x color %d from bottle %d to bottle %d", amount, moved[0], source.id, target.id)
