"""
Discover and download the daily Fama–French 3-factor file.

This module:
- Scrapes the Kenneth French data library page for the ZIP links it lists.
- Picks the daily 3-factor research file (Mkt-RF, SMB, HML, RF).
- Saves it under `capm_report_data/raw/`, reusing an existing download.

Scraping rather than hard-coding the URL keeps working when the library
renames its CSV/TXT variants.
"""

from __future__ import annotations

from dataclasses import dataclass
from html.parser import HTMLParser
from pathlib import Path
from typing import Dict, List, Optional

import requests

from .config import RAW_DIR


BASE_URL = "https://mba.tuck.dartmouth.edu/pages/faculty/ken.french/"
DATA_LIBRARY_URL = BASE_URL + "data_library.html"


def _stage(msg: str) -> None:
    print(f"[capm_report] {msg}", flush=True)


class _ZipLinkParser(HTMLParser):
    """Collect href targets ending in .zip."""

    def __init__(self) -> None:
        super().__init__()
        self.links: List[str] = []

    def handle_starttag(self, tag, attrs) -> None:  # type: ignore[override]
        if tag != "a":
            return
        for attr, value in attrs:
            if attr == "href" and value and value.endswith(".zip"):
                self.links.append(value)


@dataclass
class AvailableFiles:
    """ZIP filenames on the data library page and their absolute URLs."""

    filenames: List[str]
    url_map: Dict[str, str]


def _absolute_url(link: str) -> str:
    if link.startswith("http"):
        return link
    if link.startswith("/"):
        return "https://mba.tuck.dartmouth.edu" + link
    if link.startswith("ftp/"):
        return BASE_URL + link
    return BASE_URL + "ftp/" + link


def parse_zip_links(html: str) -> AvailableFiles:
    """Extract the ZIP files linked from a data library HTML page."""
    parser = _ZipLinkParser()
    parser.feed(html)

    url_map: Dict[str, str] = {}
    for link in parser.links:
        full_url = _absolute_url(link)
        url_map[full_url.split("/")[-1]] = full_url
    return AvailableFiles(filenames=sorted(url_map), url_map=url_map)


def discover_available_files(session: Optional[requests.Session] = None) -> AvailableFiles:
    """Scrape the data library page and return the ZIP files it links to."""
    _stage(f"Discovering Fama–French ZIP files from {DATA_LIBRARY_URL} ...")
    getter = session or requests
    response = getter.get(DATA_LIBRARY_URL, timeout=30)
    response.raise_for_status()

    available = parse_zip_links(response.text)
    _stage(f"Found {len(available.filenames)} ZIP files.")
    return available


def find_file_by_keywords(
    available: AvailableFiles,
    keywords: List[str],
    exclude_keywords: Optional[List[str]] = None,
    prefer_csv: bool = True,
) -> Optional[str]:
    """
    Return the first filename containing every keyword (case-insensitive)
    and none of `exclude_keywords`. CSV variants win over TXT when
    `prefer_csv` is set.
    """
    exclude_keywords = exclude_keywords or []
    matches = []
    for filename in available.filenames:
        name_upper = filename.upper()
        if not all(kw.upper() in name_upper for kw in keywords):
            continue
        if any(kw.upper() in name_upper for kw in exclude_keywords):
            continue
        matches.append(filename)

    if not matches:
        return None
    if prefer_csv:
        csv_matches = [m for m in matches if "_CSV" in m.upper()]
        if csv_matches:
            return csv_matches[0]
    return matches[0]


def download_file(url: str, dest: Path, description: str, refresh: bool = False) -> Path:
    """Download `url` to `dest` unless it is already there."""
    dest.parent.mkdir(parents=True, exist_ok=True)
    if dest.exists() and not refresh:
        _stage(f"✓ {description} already downloaded at {dest}")
        return dest

    _stage(f"Downloading {description} from {url} ...")
    resp = requests.get(url, timeout=60)
    resp.raise_for_status()
    if not resp.content:
        raise RuntimeError(f"Empty response when downloading {description} from {url}")

    dest.write_bytes(resp.content)
    _stage(f"✓ Saved {description} ({dest.stat().st_size:,} bytes) to {dest}")
    return dest


def download_ff3_daily_zip(
    available: Optional[AvailableFiles] = None,
    raw_dir: Path = RAW_DIR,
    refresh: bool = False,
) -> Path:
    """
    Download the daily Fama–French 3-factor ZIP into `raw_dir`.

    Returns
    -------
    Path
        Path to the ZIP (typically `F-F_Research_Data_Factors_daily_CSV.zip`).
    """
    if available is None:
        available = discover_available_files()

    filename = find_file_by_keywords(
        available,
        keywords=["F-F", "Research", "Data", "Factors", "daily"],
        exclude_keywords=["5_Factors", "2x3"],
    )
    if filename is None:
        raise RuntimeError("Could not find the daily Fama–French 3-factor ZIP on the data library page.")

    return download_file(
        available.url_map[filename],
        raw_dir / filename,
        description="Fama–French 3-factor daily",
        refresh=refresh,
    )
