# settings.py
from __future__ import annotations
import os

DEFAULT_RECIPE = "recipekit_recipe.py"
STATE_DIR = os.environ.get("RECIPEKIT_STATE_DIR", ".recipekit")
CHECKPOINT_FILE = "checkpoint.json"
TEMPLATES_DIR = os.environ.get("RECIPEKIT_TEMPLATES") or None
