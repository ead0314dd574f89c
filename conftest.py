"""Test bootstrap: keep the event log and exports out of the user's home."""

import os
import tempfile

_TMP = tempfile.mkdtemp(prefix="signease-tests-")

os.environ["SIGNEASE_DATABASE__LOGGING"] = os.path.join(_TMP, "logs.db")
os.environ["SIGNEASE_EXPORT__OUTPUT_DIR"] = os.path.join(_TMP, "exports")
os.environ["SIGNEASE_TYPED__FONT_DIR"] = os.path.join(_TMP, "fonts")
os.environ["SIGNEASE_ADVISORY__API_KEY"] = ""
