from typing import Sequence

import pandas as pd

from domain.models import AnalysisRow


def analysis_frame(rows: Sequence[AnalysisRow]) -> pd.DataFrame:
  records = []
  for row in rows:
    rec = {"symbol": row.stock.symbol, "name": row.stock.name, "sector": row.stock.sector or "", "is_simulated": row.is_simulated}
    for stat in row.history:
      rec[f"price:{stat.date.isoformat()}"] = stat.price
      rec[f"change:{stat.date.isoformat()}"] = stat.change_percent
    records.append(rec)
  return pd.DataFrame.from_records(records)


def export_table(df:pd.DataFrame, path:str):
  if path.lower().endswith('.csv'): df.to_csv(path,index=False,encoding='utf-8-sig')
  elif path.lower().endswith('.xlsx'): df.to_excel(path,index=False)
  elif path.lower().endswith('.json'): df.to_json(path,force_ascii=False,orient='records',indent=2)
  else: raise ValueError('Unsupported export format')
