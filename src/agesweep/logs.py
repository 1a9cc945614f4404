from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"


def setup_logging(level: str = "INFO", verbose: bool = False) -> logging.Logger:
    """Configure operator diagnostics on stderr.

    Item-level scan failures are reported at DEBUG, so ``verbose`` is what
    surfaces them. The audit trail of a live run is a separate file written by
    :class:`agesweep.audit.AuditLog`.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else getattr(logging, level))

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)
    for handler in list(root.handlers):
        if getattr(handler, "_agesweep", False):
            root.removeHandler(handler)

    sh = logging.StreamHandler()
    sh.setFormatter(fmt)
    sh._agesweep = True  # type: ignore[attr-defined]
    root.addHandler(sh)
    return logging.getLogger("agesweep")
