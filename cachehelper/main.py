import uvicorn

from .api import app
from .config import config
from .logging_config import init_logging


def run():
    init_logging(config.LOG_LEVEL)
    uvicorn.run(app, host="0.0.0.0", port=config.PORT, log_config=None)


if __name__ == "__main__":
    run()
