import os

from dotenv import load_dotenv

load_dotenv()

# Local data directory
CHIRP_HOME = os.path.expanduser(os.getenv("CHIRP_HOME", os.path.join("~", ".chirp")))

# Database configuration
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{os.path.join(CHIRP_HOME, 'data.db')}")

# Attachment store and login state
MEDIA_DIR = os.path.expanduser(os.getenv("MEDIA_DIR", os.path.join(CHIRP_HOME, "media")))
SESSION_FILE = os.path.expanduser(os.getenv("SESSION_FILE", os.path.join(CHIRP_HOME, "session.json")))
MAX_IMAGE_BYTES = int(os.getenv("MAX_IMAGE_BYTES", str(5 * 1024 * 1024)))

# Logging configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
LOG_FORMAT = os.getenv("LOG_FORMAT", "console").lower()

# Content limits
MAX_POST_LENGTH = 280
MAX_IMAGES_PER_POST = 4
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 15
