import logging


def setup_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    # The Google client libraries are chatty at INFO
    for name in ("urllib3", "google"):
        logging.getLogger(name).setLevel(logging.WARNING)
