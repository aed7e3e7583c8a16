import logging

import uvicorn

from sitehub.config import settings

if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run("sitehub.main:app", host="0.0.0.0", port=settings.port, log_config=None)
