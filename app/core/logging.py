import logging

_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def configure_logging(level: str) -> None:
    """Root logging setup; stdout only (the container runtime collects it)."""
    lvl = _LEVELS.get(level.strip().lower(), logging.INFO)
    logging.basicConfig(
        level=lvl,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("uvicorn.error").setLevel(lvl)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
