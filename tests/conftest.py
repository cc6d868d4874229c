"""Root pytest configuration for all tests.

This conftest applies to all test types (unit, integration).
"""

import logging

# mwclient and urllib3 log every retry at WARNING or above, which only
# clutters test output when network failures are simulated.
logging.getLogger("mwclient").setLevel(logging.ERROR)
logging.getLogger("urllib3").setLevel(logging.ERROR)
