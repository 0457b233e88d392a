"""
Loader Module

Fetches the raw incident table from a URL or a local CSV file.
Every field is kept as a string; no schema validation happens here.
"""

import io
import logging
from pathlib import Path
from typing import Optional, Union

import pandas as pd
import requests

from .config import PipelineConfig
from .errors import SourceUnavailable

logger = logging.getLogger(__name__)


class IncidentLoader:
    """Loads raw incident records into a string-typed DataFrame"""

    def __init__(self, config: Optional[PipelineConfig] = None) -> None:
        self.config = config or PipelineConfig()

    def load(self, source: Optional[Union[str, Path]] = None) -> pd.DataFrame:
        """Load raw records from ``source`` (defaults to the configured URL)"""
        source = source if source is not None else self.config.source_url
        if isinstance(source, str) and source.startswith(("http://", "https://")):
            text = self._fetch(source)
            raw = self._parse(io.StringIO(text), source)
        else:
            path = Path(source)
            if not path.exists():
                raise SourceUnavailable(f"Data file not found: {path}")
            raw = self._parse(path, str(path))

        logger.info(f"Loaded {len(raw):,} raw records with {len(raw.columns)} columns")
        return raw

    def _fetch(self, url: str) -> str:
        logger.info(f"Fetching incident data from {url}")
        try:
            resp = requests.get(url, timeout=self.config.request_timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise SourceUnavailable(f"Could not fetch {url}: {e}") from e

        if not resp.text.strip():
            raise SourceUnavailable(f"Empty response from {url}")
        return resp.text

    @staticmethod
    def _parse(buffer, name: str) -> pd.DataFrame:
        try:
            # keep_default_na=False leaves blanks as "" so the cleaner decides what counts as missing
            return pd.read_csv(buffer, dtype=str, keep_default_na=False)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise SourceUnavailable(f"Malformed CSV from {name}: {e}") from e
