import uvicorn

from chatrelay.core.config import settings


def run() -> None:
    uvicorn.run("chatrelay.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
