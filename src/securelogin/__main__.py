"""securelogin entrypoint.

Run with:
  python -m securelogin
"""

import logging
import os

import uvicorn

from securelogin.app import create_app
from securelogin.bootstrap import build_container
from securelogin.config import load_config
from securelogin.container import set_container


def main() -> None:
    logging.basicConfig(
        level=os.getenv("SECURELOGIN_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    container = build_container(load_config())
    set_container(container)
    host = os.getenv("SECURELOGIN_HOST", "127.0.0.1")
    port = int(os.getenv("SECURELOGIN_PORT", "8000"))
    uvicorn.run(create_app(container), host=host, port=port)

if __name__ == "__main__":
    main()
