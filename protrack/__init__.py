"""Top-level package for ProTrack.

ProTrack records daily expenses and time entries per user and derives the
numbers its dashboards show.  The main modules are:

* ``time_math`` - clock and duration arithmetic
* ``aggregation`` - totals, breakdowns and productivity over records
* ``budget`` - monthly budget status
* ``store`` - SQLite persistence behind the ``RecordStore`` interface
* ``dashboard`` - view models for each screen
* ``app`` - the Streamlit app that ties everything together

To run the app from the command line you can execute:

```bash
streamlit run protrack/app.py
```
"""

from . import aggregation  # noqa: F401
from . import time_math  # noqa: F401
from . import visualization  # noqa: F401
# Streamlit may not be installed everywhere (e.g. when only the core
# library is used in tests), so the app module is optional.
try:
    from . import app  # type: ignore  # noqa: F401
except ModuleNotFoundError:
    app = None  # type: ignore


__all__ = ["aggregation", "time_math", "visualization", "app"]
