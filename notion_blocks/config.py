
import os
import logging
from dotenv import load_dotenv, find_dotenv

# Load environment variables from .env file
load_dotenv(find_dotenv())

# Block dump location (written by the fetch layer, one JSON file per page)
LESSON_DATA_DIR = os.getenv("LESSON_DATA_DIR", "data/lessons")

# Validate parsed sections against the output contract before handing them on
VALIDATE_OUTPUT = os.getenv("VALIDATE_OUTPUT", "true").lower() in ("1", "true", "yes")

# Logging Configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def setup_logging():
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
