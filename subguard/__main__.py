import uvicorn

from subguard.config import settings


def main() -> None:
    uvicorn.run(
        "subguard.main:app",
        host="0.0.0.0",
        port=8000,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
