"""
Logging setup shared by the API and workers
"""
import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once; later calls only adjust the level."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    else:
        root.setLevel(level.upper())
    # The Firestore watch stream is chatty at INFO
    logging.getLogger("google.cloud.firestore_v1.watch").setLevel(logging.WARNING)
