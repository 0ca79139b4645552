"""
Serve the focus API with uvicorn.

Usage:
    python -m focus_api

Host and port come from the HOST and PORT environment variables (or .env);
defaults are 127.0.0.1 and 8080.
"""
import uvicorn

from .settings import get_settings


# PUBLIC_INTERFACE
def main() -> None:
    """Run the application until interrupted."""
    settings = get_settings()
    uvicorn.run(
        "focus_api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
