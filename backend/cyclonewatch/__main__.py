"""Run the API server: ``python -m cyclonewatch``."""

import os

import uvicorn

from cyclonewatch.main import create_app


def main() -> None:
    uvicorn.run(
        create_app(),
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
    )


if __name__ == "__main__":
    main()
