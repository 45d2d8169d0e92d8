#!/usr/bin/env python3
from __future__ import annotations

"""
NGO site launcher.

- Local dev:             ./run.py --env development
- Local dev (no reload): ./run.py --env development --no-reload
- Flask CLI:             flask --app run:app seed-site
"""

import argparse
import logging
import os
from typing import Optional, Sequence

from dotenv import load_dotenv

from ngosite import create_app
from ngosite.config import CONFIG_BY_NAME

load_dotenv(override=False)

log = logging.getLogger("run")


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Run the NGO site")
    p.add_argument("--env", choices=sorted(CONFIG_BY_NAME), default=os.getenv("APP_ENV", "development"))
    p.add_argument("--host", default=os.getenv("HOST", "127.0.0.1"))
    p.add_argument("--port", type=int, default=int(os.getenv("PORT", "5000")))
    p.add_argument("--no-reload", action="store_true", help="Disable the auto reloader")
    return p.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    application = create_app(args.env)
    if args.env == "production" and not args.no_reload:
        log.warning("Reloader enabled in production; pass --no-reload")
    application.run(
        host=args.host,
        port=args.port,
        debug=bool(application.config.get("DEBUG")),
        use_reloader=not args.no_reload,
    )


if __name__ == "__main__":
    main()
else:
    # `flask --app run:app ...` and gunicorn "run:app"
    app = create_app()
