"""Global pytest configuration."""

import os

# Tests run against fixtures, the rule-based extractor and in-memory bookings
# unless a test opts in explicitly.
os.environ["OPENAI_API_KEY"] = ""
os.environ.pop("VENDOR_API_BASE_URL", None)
os.environ.pop("DATABASE_URL", None)
