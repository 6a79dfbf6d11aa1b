from __future__ import annotations

import uvicorn

from employee_api.config import Settings, configure_logging


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    uvicorn.run("employee_api.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
