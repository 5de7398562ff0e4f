"""Entry point for the document conversion server."""

import argparse
import os

import uvicorn


def main():
    parser = argparse.ArgumentParser(description="Document to Markdown conversion server")
    parser.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=3001, help="Bind port (default: 3001)")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: INFO). Overrides LOG_LEVEL env var.",
    )
    parser.add_argument(
        "--image-dir",
        default=None,
        help="Preview image directory. Overrides IMAGE_STORAGE_DIR env var.",
    )
    args = parser.parse_args()

    if args.log_level:
        os.environ["LOG_LEVEL"] = args.log_level
    if args.image_dir:
        os.environ["IMAGE_STORAGE_DIR"] = args.image_dir

    from docmap_server.server import app

    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
