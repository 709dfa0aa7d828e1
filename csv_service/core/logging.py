import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configura el logger raíz con un único handler de consola."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, force=True)
