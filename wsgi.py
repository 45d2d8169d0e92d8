import os

# Force production env unless the process already chose one
os.environ.setdefault("APP_ENV", "production")

from ngosite import create_app  # noqa: E402

app = create_app()
