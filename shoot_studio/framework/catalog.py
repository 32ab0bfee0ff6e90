from __future__ import annotations

import os

import pandas as pd

from promptkit.library import ALL_CATEGORIES, GLOBAL_RULES_CATEGORY, SELECTABLE_CATEGORIES, Library
from promptkit.scope import derive_meta

CATALOG_COLUMNS: tuple[str, ...] = (
    "id",
    "category",
    "label",
    "scope",
    "requires_character",
    "requires_product",
    "requires_environment",
    "constraint_count",
)

_CATEGORY_RANK = {
    category: idx
    for idx, category in enumerate((GLOBAL_RULES_CATEGORY, *SELECTABLE_CATEGORIES))
}


def build_catalog_frame(library: Library) -> pd.DataFrame:
    """One row per module with its derived scope and reference requirements."""

    rows = []
    for module in library.by_id.values():
        meta = derive_meta(module)
        rows.append(
            {
                "id": module.id,
                "category": module.category,
                "label": module.label,
                "scope": meta.scope,
                "requires_character": meta.requires.character,
                "requires_product": meta.requires.product,
                "requires_environment": meta.requires.environment,
                "constraint_count": len(module.constraints),
            }
        )

    if not rows:
        return pd.DataFrame(columns=list(CATALOG_COLUMNS))

    df = pd.DataFrame(rows, columns=list(CATALOG_COLUMNS))
    df["_rank"] = df["category"].map(_CATEGORY_RANK).fillna(len(ALL_CATEGORIES))
    df = df.sort_values(["_rank", "id"], kind="mergesort").drop(columns=["_rank"])
    return df.reset_index(drop=True)


def write_catalog_csv(library: Library, path: str) -> pd.DataFrame:
    df = build_catalog_frame(library)
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    df.to_csv(path, index=False)
    return df
