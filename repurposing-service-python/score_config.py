"""
Score column metadata for the presentation layer.
Loads score_columns.csv (display names, descriptions, polarity) once.
"""
import logging
import os
from typing import Dict, List

import pandas as pd
from pydantic.alias_generators import to_camel

from models import COMPONENT_FIELDS, ScoreColumn

logger = logging.getLogger(__name__)

DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), '..', 'data')
CSV_PATH = os.path.join(DATA_DIR, 'score_columns.csv')

REQUIRED_COLUMNS = ['key', 'display_name', 'description', 'is_inverted']
COMPONENT_KEYS = [to_camel(name) for name in COMPONENT_FIELDS]


def _as_bool(value) -> bool:
    return str(value).strip().lower() in ("true", "1", "yes")


class ScoreConfig:
    """Loads the score column CSV; an unusable file leaves no columns rather than failing."""

    def __init__(self, csv_path: str = CSV_PATH):
        self.csv_path = csv_path
        self.columns: List[ScoreColumn] = []
        self._load_columns()

    def _load_columns(self):
        try:
            df = pd.read_csv(self.csv_path)
            missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
            if missing:
                raise ValueError(f"CSV missing columns: {missing}")

            keys = df['key'].astype(str).str.strip().tolist()
            if sorted(keys) != sorted(COMPONENT_KEYS):
                raise ValueError(f"CSV keys {keys} do not match components {COMPONENT_KEYS}")

            # Keep the component order, not the file order
            by_key = {str(row['key']).strip(): row for _, row in df.iterrows()}
            self.columns = [
                ScoreColumn(
                    key=key,
                    display_name=str(by_key[key]['display_name']),
                    description=str(by_key[key]['description']),
                    is_inverted=_as_bool(by_key[key]['is_inverted']),
                )
                for key in COMPONENT_KEYS
            ]
            logger.info("Loaded %d score columns from %s", len(self.columns), self.csv_path)
        except (OSError, ValueError) as e:
            logger.warning("Could not load score columns: %s", e)
            self.columns = []

    def display_names(self) -> Dict[str, str]:
        return {c.key: c.display_name for c in self.columns}

    def inverted_keys(self) -> List[str]:
        return [c.key for c in self.columns if c.is_inverted]
