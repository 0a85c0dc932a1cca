"""
Connector Utilities
-------------------
Helper functions shared by connectors: logging, .env loading and file dumps.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd
from dotenv import load_dotenv


def setup_logging(level: str = "INFO") -> None:
    """Configure logging format and level."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def load_env(dotenv_path: Optional[Path] = None) -> None:
    """Load environment variables from a .env file if present."""
    if dotenv_path is None:
        load_dotenv()
        return
    if dotenv_path.exists():
        load_dotenv(dotenv_path)
        logging.debug(f"Loaded .env from {dotenv_path}")
    else:
        logging.debug(f".env file not found at {dotenv_path}")


def to_jsonl(data: Union[List[dict], dict], jsonl_output_path: str, key: str = "items") -> None:
    """
    Write a list of objects (or a dict holding such a list) as JSONL.

    Args:
        data: List of objects, or dict containing the list under ``key``.
        jsonl_output_path: Output file path.
        key: Key to look up when ``data`` is a dict.
    """
    items = data.get(key, []) if isinstance(data, dict) else data
    with open(jsonl_output_path, "w", encoding="utf-8") as fout:
        for item in items:
            fout.write(json.dumps(item, ensure_ascii=False, default=str) + "\n")


def dump_nested_csv(df: pd.DataFrame, filename: str) -> None:
    """Write a DataFrame to CSV, serialising nested dict/list cells as JSON."""
    for col in df.columns:
        if df[col].apply(lambda x: isinstance(x, (dict, list))).any():
            df[col] = df[col].apply(
                lambda x: (
                    json.dumps(x, ensure_ascii=False)
                    if isinstance(x, (dict, list))
                    else x
                )
            )
    df.to_csv(filename, index=False)


def write_records(records: List[Dict[str, Any]], output_path: Path) -> None:
    """Write records to ``output_path`` as CSV or JSONL depending on the suffix."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    if output_path.suffix == ".csv":
        dump_nested_csv(pd.DataFrame(records), str(output_path))
    else:
        to_jsonl(records, str(output_path))
    logging.info(f"📁 Dump saved to: {output_path} ({len(records)} items)")
