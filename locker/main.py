import uvicorn

from locker.configs.setup import create_app
from locker.configs.settings import settings

app = create_app()


if __name__ == "__main__":
    uvicorn.run("locker.main:app", host=settings.app_host, port=settings.app_port, reload=settings.APP_ENV == "dev")
