"""
Run the RentFinder web app.

Run with: python -m rentfinder
         python -m rentfinder --port 8080 --reload
"""

import argparse

import uvicorn


def main():
    parser = argparse.ArgumentParser(description="Serve the RentFinder web app")
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind")
    parser.add_argument("--port", type=int, default=3000, help="Port to listen on")
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart on code changes (development only).",
    )
    args = parser.parse_args()
    uvicorn.run("rentfinder.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
