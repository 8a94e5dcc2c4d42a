import logging
import os

# load envs
from dotenv import load_dotenv
load_dotenv()

from api import create_app
from document_detection import ScannerConfig


PORT = int(os.getenv("PORT", 5000))
HOST = os.getenv("HOST", None)
DEBUG = os.getenv("DEBUG", "false").lower() == "true"

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

app = create_app(ScannerConfig.from_env())


if __name__ == "__main__":
    app.run(debug=DEBUG, port=PORT, host=HOST)
