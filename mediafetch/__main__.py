import uvicorn

from mediafetch.core.config import get_settings
from mediafetch.main import create_app


def main():
    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
