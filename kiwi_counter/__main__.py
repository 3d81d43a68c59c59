"""Kiwi Sales Counter entrypoint.

Run with:
  python -m kiwi_counter
"""

import os

import uvicorn

from kiwi_counter.core.config import HOST, PORT


def main() -> None:
    reload = os.getenv("RELOAD", "false").lower() in {"1", "true", "yes", "y"}
    uvicorn.run(
        "kiwi_counter.main:create_app",
        factory=True,
        host=HOST,
        port=PORT,
        reload=reload,
        log_config=None,
    )


if __name__ == "__main__":
    main()
