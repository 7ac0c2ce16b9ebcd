"""
Serve command - run the API server.
"""

from wordwise.server.main import run


def add_subparser(subparsers):
    parser = subparsers.add_parser("serve", help="Run the API server")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    parser.add_argument("--port", type=int, default=8000, help="Port")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    parser.set_defaults(func=serve)


def serve(args):
    run(args.host, args.port, args.reload)
