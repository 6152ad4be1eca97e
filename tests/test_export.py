import json
from datetime import date

import pandas as pd
import pytest

from domain.models import AnalysisRow, DailyStat, StockRef
from export.exporter import analysis_frame, export_table


def _rows():
    return [
        AnalysisRow(
            stock=StockRef("COMI", "CIB Bank", "Banking"),
            history=(
                DailyStat(date(2024, 6, 12), 82.5, 1.25),
                DailyStat(date(2024, 6, 11), 81.48, -0.4),
            ),
        ),
        AnalysisRow(stock=StockRef("NEWCO", "NEWCO Stock"), history=(), is_simulated=True),
    ]


def test_analysis_frame_layout():
    df = analysis_frame(_rows())

    assert list(df["symbol"]) == ["COMI", "NEWCO"]
    assert df.loc[0, "price:2024-06-12"] == 82.5
    assert df.loc[0, "change:2024-06-11"] == -0.4
    assert df.loc[1, "sector"] == ""
    assert bool(df.loc[1, "is_simulated"]) is True


def test_export_table_csv(tmp_path):
    out_path = tmp_path / "output.csv"

    export_table(analysis_frame(_rows()[:1]), str(out_path))

    content = out_path.read_text(encoding="utf-8-sig")
    assert "symbol,name,sector,is_simulated,price:2024-06-12" in content
    assert "COMI,CIB Bank,Banking,False,82.5" in content


def test_export_table_json(tmp_path):
    df = pd.DataFrame({"A": [1], "B": ["z"]})
    out_path = tmp_path / "output.json"

    export_table(df, str(out_path))

    data = json.loads(out_path.read_text(encoding="utf-8"))
    assert data == [{"A": 1, "B": "z"}]


def test_export_table_invalid_extension(tmp_path):
    df = pd.DataFrame({"value": [1]})
    out_path = tmp_path / "output.txt"

    with pytest.raises(ValueError):
        export_table(df, str(out_path))
