"""
Entry point for running the API locally.

Usage:
    evolvefit-api
    python -m evolvefit.serve
"""
from __future__ import annotations
import uvicorn
from evolvefit.config import settings


def main() -> None:
    uvicorn.run(
        "evolvefit.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.environment == "dev",
        log_config=None,  # structlog owns the root logger
    )


if __name__ == "__main__":
    main()
