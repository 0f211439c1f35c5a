"""Activity exporter — write a user's activity log to CSV or JSON."""

import json
import os
from datetime import datetime, timezone
from typing import List, Optional

import pandas as pd

from src.models.user_record import ActivityEntry

COLUMNS = ['username', 'description', 'timestamp']


class ActivityExporter:
    """Export activity entries to files under ``output_dir``."""

    def __init__(self, output_dir: str = "data/exports"):
        self.output_dir = output_dir

    def to_dataframe(self, entries: List[ActivityEntry]) -> pd.DataFrame:
        return pd.DataFrame([e.to_dict() for e in entries], columns=COLUMNS)

    def export(
        self,
        entries: List[ActivityEntry],
        username: str,
        fmt: str = "csv",
        output_dir: Optional[str] = None,
    ) -> str:
        """Export entries in the requested format.

        Args:
            entries: Activity entries to write, in order.
            username: Whose log this is (used in the file name).
            fmt: Export format — ``'csv'`` or ``'json'``.
            output_dir: Directory for the export file. Defaults to output_dir.

        Returns:
            Path to the exported file.
        """
        out_dir = output_dir or self.output_dir
        os.makedirs(out_dir, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")

        if fmt == "csv":
            out_path = os.path.join(out_dir, f"{username}_activities_{stamp}.csv")
            self.to_dataframe(entries).to_csv(out_path, index=False)
        elif fmt == "json":
            out_path = os.path.join(out_dir, f"{username}_activities_{stamp}.json")
            payload = {
                "username": username,
                "exported_at": datetime.now(timezone.utc).isoformat(),
                "count": len(entries),
                "activities": [e.to_dict() for e in entries],
            }
            with open(out_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
        else:
            raise ValueError(f"Unsupported format: {fmt}. Use 'csv' or 'json'.")

        return out_path
