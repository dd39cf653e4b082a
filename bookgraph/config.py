"""Configuration management."""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration."""

    # Store
    SEED_FILE = os.getenv("SEED_FILE")
    ID_STRATEGY = os.getenv("ID_STRATEGY", "counter")

    # CLI
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    DEFAULT_FORMAT = os.getenv("DEFAULT_FORMAT", "table")
