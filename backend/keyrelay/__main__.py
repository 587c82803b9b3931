# keyrelay/__main__.py

import uvicorn

from keyrelay import config


def main():
    uvicorn.run("keyrelay.main:app", host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
