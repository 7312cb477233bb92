"""
output_writers.py

Serialises the corrected sign-in records and the statistics report.

Records are written with the upper-case column headers of the sign-in
schema. CSV and TSV render booleans as True/False; JSON lines uses JSON
true/false. The analysis-only application attributes are never written.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import IO, Optional, Sequence, Union

import pandas as pd

from mfa_config import GeneratorConfig
from signin_synthesizer import RECORD_COLUMNS, SignInRecord, records_to_dataframe

Destination = Union[Path, IO[str]]

# Headers of the str-typed record fields
TEXT_HEADERS = [
    header for attr, header in RECORD_COLUMNS
    if SignInRecord.__dataclass_fields__[attr].type is str
]


def records_to_output_frame(records: Sequence[SignInRecord]) -> pd.DataFrame:
    """Output columns only, renamed to their headers and in schema order."""
    attrs = [attr for attr, _ in RECORD_COLUMNS]
    df = records_to_dataframe(records)[attrs]
    return df.rename(columns=dict(RECORD_COLUMNS))


class DataWriter:
    """Writes generated sign-in data and statistics."""

    def __init__(self, config: GeneratorConfig):
        self.config = config
        self.output_format = config.output_format
        self.logger = logging.getLogger(self.__class__.__name__)

    def write_records(self, records: Sequence[SignInRecord], destination: Destination) -> None:
        """Write records to a file path or an open text stream."""
        df = records_to_output_frame(records)

        if isinstance(destination, Path):
            destination.parent.mkdir(parents=True, exist_ok=True)
            with open(destination, 'w', newline='', encoding='utf-8') as f:
                self._write_frame(df, f)
            self.logger.info(f"Written {len(df)} sign-in records to {destination} ({self.output_format})")
        else:
            self._write_frame(df, destination)
            self.logger.info(f"Written {len(df)} sign-in records to stream ({self.output_format})")

    def _write_frame(self, df: pd.DataFrame, stream: IO[str]) -> None:
        if self.output_format == 'json':
            self._write_json_lines(df, stream)
        elif self.output_format == 'tsv':
            # Embedded tabs/newlines would break the row structure
            cleaned = df.copy()
            cleaned[TEXT_HEADERS] = cleaned[TEXT_HEADERS].replace(r'[\t\r\n]', ' ', regex=True)
            cleaned.to_csv(stream, sep='\t', index=False, lineterminator='\n')
        else:
            df.to_csv(stream, index=False, lineterminator='\n')

    @staticmethod
    def _write_json_lines(df: pd.DataFrame, stream: IO[str]) -> None:
        for row in df.to_dict(orient='records'):
            stream.write(json.dumps({k: _plain(v) for k, v in row.items()}))
            stream.write('\n')

    def statistics_path(self, data_path: Optional[Path] = None,
                        when: Optional[datetime] = None) -> Path:
        """Companion stats file beside the data file (or in the working directory)."""
        when = when or datetime.now()
        directory = data_path.parent if data_path is not None else Path('.')
        return directory / f"mfa_stats_{when:%Y-%m-%dT%H-%M-%S}.txt"

    def write_statistics(self, text: str, destination: Destination) -> None:
        """Write the rendered statistics report."""
        if isinstance(destination, Path):
            destination.parent.mkdir(parents=True, exist_ok=True)
            with open(destination, 'w', encoding='utf-8') as f:
                f.write(text)
            self.logger.info(f"Written statistics to {destination}")
        else:
            destination.write(text)


def _plain(value):
    """numpy scalars to plain Python values for json.dumps."""
    if hasattr(value, 'item'):
        return value.item()
    return value
