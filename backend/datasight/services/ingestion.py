"""
CSV ingestion — uploaded file → list of row mappings.

Whitespace-only lines are skipped. The first remaining line is the header
and its trimmed names become the keys of every row. Quoted fields may
contain the delimiter. Every cell is kept as a trimmed string: short rows
are padded with "" and surplus cells are dropped. A malformed file, such as
one with an unterminated quote, yields no rows.
Type interpretation is left to the analyzers.
"""

import csv
import io
import logging
from typing import Dict, List

import pandas as pd

logger = logging.getLogger("datasight.ingestion")

ENCODINGS = ("utf-8-sig", "utf-8", "latin-1", "cp1252")


def decode_upload(content: bytes) -> str:
    """Decode uploaded bytes with the first encoding that fits."""
    for encoding in ENCODINGS:
        try:
            return content.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            continue
    return content.decode("utf-8", errors="replace")


def parse_csv(text: str) -> List[Dict[str, str]]:
    """Parse CSV text into rows keyed by the header names.

    Keys are the raw trimmed header cells: a blank header cell gives the key
    "" and a repeated name keeps the value of its last occurrence.
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if len(lines) < 2:
        return []

    try:
        header = pd.read_csv(
            io.StringIO(lines[0]),
            header=None,
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
        )
        names = [str(name).strip() for name in header.iloc[0]]
        frame = pd.read_csv(
            io.StringIO("\n".join(lines)),
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
            engine="python",
            index_col=False,
            usecols=range(len(names)),
        )
    except pd.errors.EmptyDataError:
        logger.warning("parse_csv: no header row found")
        return []
    except (pd.errors.ParserError, csv.Error) as exc:
        logger.warning("parse_csv: malformed CSV: %s", exc)
        return []

    frame = frame.fillna("")
    rows = [
        dict(zip(names, (str(value).strip() for value in record)))
        for record in frame.itertuples(index=False, name=None)
    ]
    logger.info("parse_csv: %d rows × %d columns", len(rows), len(names))
    return rows
