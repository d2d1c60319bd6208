import sys
from pathlib import Path

# Ensure the application package root is on sys.path so importing
# `notification_hub` works during pytest collection even when the project
# is not installed and pytest is invoked from another directory.
project_root = str(Path(__file__).resolve().parents[1])
if project_root not in sys.path:
    sys.path.insert(0, project_root)
