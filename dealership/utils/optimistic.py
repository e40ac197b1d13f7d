"""Two-phase local updates: apply a tentative change, confirm remotely, compensate on failure."""
import logging

logger = logging.getLogger(__name__)


def optimistic(apply, commit, compensate):
    """
    Run ``apply()`` then ``commit()``. If ``commit`` raises, ``compensate()``
    restores the prior local state and the error propagates to the caller.
    Returns whatever ``commit`` returns.
    """
    apply()
    try:
        return commit()
    except Exception:
        logger.warning("Remote update failed; reverting local state", exc_info=True)
        compensate()
        raise
