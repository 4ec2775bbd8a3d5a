"""Run the CardSheet API server with uvicorn."""
import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import uvicorn

from src.api.main import app
from src.utils.settings import get_csv_url


def main():
    parser = argparse.ArgumentParser(description="Run the CardSheet API server")
    parser.add_argument("--host", type=str, default="0.0.0.0", help="Bind address (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")
    args = parser.parse_args()

    print("=" * 60)
    print("STARTING CARDSHEET API")
    print("=" * 60)
    print(f"Sheet URL: {get_csv_url()}")
    print(f"API URL: http://{args.host}:{args.port}")
    print("=" * 60)
    print()

    # Pass the app object directly, not as a string
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
