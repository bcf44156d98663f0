#!/usr/bin/env python3
"""Run the tippen API server."""

import logging

import uvicorn
from dotenv import load_dotenv


def main():
    load_dotenv()
    logging.basicConfig(level=logging.INFO)
    print("Starting Tippen API server...")
    print("API documentation available at: http://localhost:8000/docs")
    uvicorn.run(
        "server.app:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )


if __name__ == "__main__":
    main()
