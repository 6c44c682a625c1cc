"""Main entry point for running the agent."""

import uvicorn

from zone_meter.config import get_settings


def main() -> None:
    """Serve the API and run the usage scheduler."""
    settings = get_settings()
    uvicorn.run(
        "zone_meter.api.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
