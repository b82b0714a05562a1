"""Blood donor registry entrypoint.

Run with:
  python -m donors
"""

import logging
import os

import uvicorn


def main() -> None:
    logging.basicConfig(
        level=os.getenv("DONORS_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host = os.getenv("DONORS_HOST", "0.0.0.0")
    port = int(os.getenv("DONORS_PORT", "8081"))
    reload = os.getenv("DONORS_RELOAD", "false").lower() in {"1", "true", "yes", "y"}
    uvicorn.run("donors.app:create_app", factory=True, host=host, port=port, reload=reload)

if __name__ == "__main__":
    main()
