"""Entry: start API server."""
import logging
import uvicorn

from audiovault.config import API_HOST, API_PORT


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    uvicorn.run(
        "audiovault.api.app:app",
        host=API_HOST,
        port=API_PORT,
    )


if __name__ == "__main__":
    main()
