import logging
import sys

FORMAT = "[%(asctime)s] %(levelname)s in %(module)s: %(message)s"


def configure_logging(app, *, level=None):
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(FORMAT))

    if level is None:
        level = logging.DEBUG if app.debug else logging.INFO

    app.logger.handlers.clear()
    app.logger.addHandler(handler)
    app.logger.setLevel(level)

    # Module loggers live under the package name.
    pkg_logger = logging.getLogger(__name__.rpartition(".")[0] or __name__)
    pkg_logger.handlers.clear()
    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(level)
    pkg_logger.propagate = False
