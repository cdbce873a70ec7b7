import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load .env before reading NEWSHUB_SETTINGS / NEWSHUB_API_URL
env_path = Path(__file__).resolve().parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


if __name__ == "__main__":
    """
    Entry point for the News Hub session client.
    Starts the interactive terminal client.
    """
    root_dir = os.path.dirname(os.path.abspath(__file__))
    sys.path.insert(0, root_dir)

    from newshub_session.ui.terminal import main

    sys.exit(main(os.getenv("NEWSHUB_SETTINGS")))
