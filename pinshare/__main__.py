"""Run the API with uvicorn: ``python -m pinshare``."""

import uvicorn

from pinshare.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "pinshare.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
