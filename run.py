#!/usr/bin/env python3
"""
Entry point script to run the Gemini chat client.

This script should be run from the project root directory:
    python run.py [options] [prompt or files...]

Or with the virtual environment:
    source .venv/bin/activate && python run.py

Environment variables:
    GEMINI_API_KEY: API key for the official endpoint (key-free mode without it)
    GEMINI_MODEL: Model name (default: gemini-2.5-pro)
    GEMINI_PROXY: Proxy URL
    APP_LOG_FILE: Optional log file
    APP_LOG_LEVEL: Log level on stderr (default: WARNING)
"""
import sys

if __name__ == "__main__":
    from gemini_chat.app import main

    sys.exit(main())
