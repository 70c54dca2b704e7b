"""
Development server for End of Line.
Runs the FastAPI app (HTTP + /ws) under uvicorn.
"""

import logging

import uvicorn

from endofline.config import HOST, LOG_LEVEL, PORT

if __name__ == "__main__":
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger(__name__).info("Serving at http://%s:%s (ws path /ws)", HOST, PORT)
    uvicorn.run("endofline.api.main:app", host=HOST, port=PORT, log_level=LOG_LEVEL.lower())
