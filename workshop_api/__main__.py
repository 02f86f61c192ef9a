"""Run the API: ``python -m workshop_api [--host HOST] [--port PORT]``."""

import argparse

import uvicorn

from workshop_api.app import create_app


def main() -> None:
    parser = argparse.ArgumentParser(description="Workshop ledger API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--config", default=None, help="Settings YAML (default: $WORKSHOP_CONFIG)")
    parser.add_argument("--create-schema", action="store_true", help="Create missing tables first")
    args = parser.parse_args()

    app = create_app(config_path=args.config, create_schema=args.create_schema)
    uvicorn.run(app, host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":
    main()
