import argparse
import logging
import os
import sys

import uvicorn


def main():
    parser = argparse.ArgumentParser(
        description="Skill Graph Engine - Layout API Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_server.py                          # Serve on 0.0.0.0:8000
  python run_server.py --port 9000 --no-reload  # Fixed port, no autoreload
  python run_server.py --config engine.json     # Custom engine config
        """
    )

    parser.add_argument('--host', default='0.0.0.0', help='Bind address')
    parser.add_argument('--port', '-p', type=int, default=8000, help='Bind port')
    parser.add_argument(
        '--config', '-c',
        default=None,
        help='Path to a JSON engine configuration (sets SKILLGRAPH_CONFIG)'
    )
    parser.add_argument('--no-reload', action='store_true', help='Disable autoreload')
    parser.add_argument('--log-level', default='info', help='Logging level')

    args = parser.parse_args()

    if args.config:
        if not os.path.exists(args.config):
            print(f"Error: Config not found at {args.config}")
            sys.exit(1)
        os.environ["SKILLGRAPH_CONFIG"] = os.path.abspath(args.config)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("Starting Skill Graph API Server...")
    print(f"Docs available at: http://localhost:{args.port}/docs")

    uvicorn.run(
        "skillgraph.api.server:app",
        host=args.host,
        port=args.port,
        reload=not args.no_reload,
        log_level=args.log_level.lower(),
    )


if __name__ == "__main__":
    main()
