from pathlib import Path

import pandas as pd

from shoot_studio.framework.catalog import CATALOG_COLUMNS, build_catalog_frame, write_catalog_csv
from shoot_studio.framework.library_io import load_library_from_data_dir

DATA_DIR = Path(__file__).resolve().parents[1] / "data"
library = load_library_from_data_dir(str(DATA_DIR))


def test_catalog_has_one_row_per_module():
    df = build_catalog_frame(library)
    assert list(df.columns) == list(CATALOG_COLUMNS)
    assert len(df) == len(library)


def test_catalog_orders_globals_first_then_canonical_categories():
    df = build_catalog_frame(library)
    categories = df["category"].tolist()
    assert categories[0] == "global_rules"
    order = ["global_rules", "facial_pose", "anatomy_pose", "apparel_textile", "product", "cinematography"]
    ranks = [order.index(c) for c in categories]
    assert ranks == sorted(ranks)


def test_catalog_reports_derived_scope_and_requirements():
    df = build_catalog_frame(library).set_index("id")
    assert df.loc["anatomy_pose_hand_gestures", "scope"] == "hands_only"
    assert df.loc["cinematography_editorial_set_projection", "scope"] == "environment_only"
    assert bool(df.loc["cinematography_editorial_set_projection", "requires_environment"]) is True
    assert df.loc["product_in_hand_beauty", "scope"] == "face_only"
    assert int(df.loc["facial_pose_primary_moods", "constraint_count"]) == 2


def test_write_catalog_csv_round_trips(tmp_path):
    out = tmp_path / "nested" / "catalog.csv"
    written = write_catalog_csv(library, str(out))

    loaded = pd.read_csv(out)
    assert loaded["id"].tolist() == written["id"].tolist()
