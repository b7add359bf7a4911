import os
import sys

# Ensure repo root is on sys.path for tests so `dbc2bsm` imports resolve
repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)
