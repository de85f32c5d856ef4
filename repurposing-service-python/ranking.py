"""
Tabular view of scored pairs: name filters, ranking and priority bands.
"""
from typing import Dict, List

import pandas as pd
from pydantic.alias_generators import to_camel

from models import DrugDiseasePair
from scoring import priority_band

SCORE_COLUMN = "compositePrioritizationScore"


def pairs_to_frame(pairs: List[DrugDiseasePair]) -> pd.DataFrame:
    """One row per pair, wire names as columns; absent scores become NaN."""
    columns = [field.alias or to_camel(name) for name, field in DrugDiseasePair.model_fields.items()]
    rows = [p.model_dump(by_alias=True) for p in pairs]
    return pd.DataFrame(rows, columns=columns)


def rank_pairs(pairs: List[DrugDiseasePair], drug_filter: str = "", disease_filter: str = "") -> pd.DataFrame:
    """
    Filter by case-insensitive substring on drug and disease name, then sort by
    composite score, highest first. Ties keep their input order.
    """
    df = pairs_to_frame(pairs)
    if df.empty:
        return df.assign(priorityBand=pd.Series(dtype=str))

    drug_match = df['drugName'].str.lower().str.contains(drug_filter.lower(), regex=False)
    disease_match = df['diseaseName'].str.lower().str.contains(disease_filter.lower(), regex=False)
    df = df[drug_match & disease_match]

    df = df.sort_values(SCORE_COLUMN, ascending=False, kind="mergesort").reset_index(drop=True)
    df['priorityBand'] = df[SCORE_COLUMN].fillna(0.0).map(priority_band)
    return df


def frame_to_records(df: pd.DataFrame) -> List[Dict]:
    """JSON-ready rows: NaN scores go back to None."""
    return df.astype(object).where(df.notna(), None).to_dict(orient="records")
