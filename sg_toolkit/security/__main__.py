"""Allow ``python -m sg_toolkit.security``."""

from .cli import main

raise SystemExit(main())
