#!/usr/bin/env python
"""Production server: no hot reload, INFO-level console logging."""

import os

os.environ["BRIEFMARK_RELOAD"] = "0"

from briefmark import main  # noqa: E402

if __name__ in {"__main__", "__mp_main__"}:
    main()
