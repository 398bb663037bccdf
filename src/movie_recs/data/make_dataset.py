import ast
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from movie_recs.config import PROCESSED_DATA_DIR, RAW_DATA_DIR, configure_logging
from movie_recs.exceptions import CorpusFormatError

logger = logging.getLogger(__name__)

# Columns holding stringified lists of {'name': ...} dicts, and how to read them
LIST_COLUMN_RULES = {
    "genres": {},
    "keywords": {},
    "cast": {"limit": 3},
    "crew": {"job": "Director"},
}
DEFAULT_TEXT_COLUMNS = ("overview", "genres", "keywords", "cast", "crew")
RAW_MOVIES_CSV = RAW_DATA_DIR / "tmdb_5000_movies.csv"
RAW_CREDITS_CSV = RAW_DATA_DIR / "tmdb_5000_credits.csv"


@dataclass(frozen=True)
class Item:
    """One corpus entry. `extra` carries pass-through metadata (e.g. release year)."""
    id: int
    title: str
    tag_text: str
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    def to_dict(self):
        return {"id": self.id, "title": self.title, **self.extra}


def parse_names(value, limit: Optional[int] = None, job: Optional[str] = None) -> List[str]:
    """
    Convert a stringified list like "[{'name': 'Action'}]" into ['Action'].
    Anything that does not parse to a list of dicts yields [].
    """
    if not isinstance(value, str):
        return []
    try:
        entries = ast.literal_eval(value)
    except (ValueError, SyntaxError):
        return []
    if not isinstance(entries, list):
        return []

    names = []
    for entry in entries:
        if not isinstance(entry, dict) or "name" not in entry:
            continue
        if job is not None and entry.get("job") != job:
            continue
        names.append(str(entry["name"]))
        if limit is not None and len(names) >= limit:
            break
    return names


def _column_tokens(column: str, value) -> List[str]:
    if column in LIST_COLUMN_RULES:
        # multi-word names become single tags: "Science Fiction" -> "sciencefiction"
        return [name.replace(" ", "") for name in parse_names(value, **LIST_COLUMN_RULES[column])]
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return []
    return str(value).split()


def build_tag_text(row, text_columns: Sequence[str] = DEFAULT_TEXT_COLUMNS) -> str:
    tokens = []
    for column in text_columns:
        tokens.extend(_column_tokens(column, row.get(column)))
    return " ".join(tokens).lower()


def _require_columns(df: pd.DataFrame, columns: Iterable[str]):
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise CorpusFormatError(f"Corpus is missing required columns: {missing}")


def items_from_frame(
    df: pd.DataFrame,
    text_columns: Sequence[str] = DEFAULT_TEXT_COLUMNS,
    id_column: str = "id",
    title_column: str = "title",
    extra_columns: Sequence[str] = (),
) -> Tuple[Item, ...]:
    """Turn a metadata table into Items, one per row, in row order.

    A `tag_text` column, when present, is taken as already normalized and
    `text_columns` are ignored.
    """
    _require_columns(df, [id_column, title_column, *extra_columns])
    prebuilt = "tag_text" in df.columns
    if not prebuilt:
        _require_columns(df, text_columns)

    items = []
    for record in df.to_dict(orient="records"):
        if prebuilt:
            tag_text = "" if pd.isna(record["tag_text"]) else str(record["tag_text"]).lower()
        else:
            tag_text = build_tag_text(record, text_columns)
        items.append(Item(
            id=int(record[id_column]),
            title=str(record[title_column]),
            tag_text=tag_text,
            extra={c: record[c] for c in extra_columns},
        ))
    logger.info(f"Built {len(items)} items from {len(df.columns)} columns")
    return tuple(items)


def load_movies(path: Path, id_column: str = "id", title_column: str = "title") -> pd.DataFrame:
    """Load movie metadata, dropping rows whose id is not numeric."""
    logger.info(f"Loading movies from {path}...")
    df = pd.read_csv(path, low_memory=False)
    _require_columns(df, [id_column, title_column])

    df[id_column] = pd.to_numeric(df[id_column], errors="coerce")
    dropped = int(df[id_column].isna().sum())
    if dropped:
        logger.warning(f"Dropped {dropped} rows with a non-numeric {id_column}")
    df = df.dropna(subset=[id_column]).copy()
    df[id_column] = df[id_column].astype(int)
    df[title_column] = df[title_column].fillna("").astype(str)

    for column in df.columns:
        if column in LIST_COLUMN_RULES:
            df[column] = df[column].fillna("[]")
        elif not pd.api.types.is_numeric_dtype(df[column]):
            df[column] = df[column].fillna("")

    logger.info(f"Movies loaded: {df.shape[0]} rows, {df.shape[1]} columns")
    return df.reset_index(drop=True)


def load_corpus(path: Path, text_columns: Sequence[str] = DEFAULT_TEXT_COLUMNS, **kwargs) -> Tuple[Item, ...]:
    return items_from_frame(load_movies(path), text_columns=text_columns, **kwargs)


def load_tmdb(movies_path: Path, credits_path: Optional[Path] = None) -> pd.DataFrame:
    """Load TMDB movies and, when given, merge cast/crew in from the credits file."""
    df = load_movies(movies_path)
    if credits_path is None:
        return df

    logger.info(f"Loading credits from {credits_path}...")
    credits = pd.read_csv(credits_path)
    _require_columns(credits, ["movie_id", "cast", "crew"])
    credits = credits[["movie_id", "cast", "crew"]].rename(columns={"movie_id": "id"})
    credits["id"] = pd.to_numeric(credits["id"], errors="coerce")
    credits = credits.dropna(subset=["id"]).drop_duplicates(subset=["id"])
    credits["id"] = credits["id"].astype(int)

    df = df.drop(columns=["cast", "crew"], errors="ignore").merge(credits, on="id", how="left")
    df[["cast", "crew"]] = df[["cast", "crew"]].fillna("[]")
    logger.info(f"Merged credits: {int((df['cast'] != '[]').sum())} of {len(df)} movies have cast data")
    return df


def build_processed_corpus(movies_path: Path, credits_path: Optional[Path], out_path: Path) -> Tuple[Item, ...]:
    if credits_path is not None and not Path(credits_path).exists():
        logger.warning(f"Credits file {credits_path} not found; cast and crew will be empty")
        credits_path = None
    df = load_tmdb(movies_path, credits_path)
    text_columns = [c for c in DEFAULT_TEXT_COLUMNS if c in df.columns]
    items = items_from_frame(df, text_columns=text_columns)
    save_items_csv(items, out_path)
    return items


def save_items_csv(items: Sequence[Item], path: Path):
    """Save items as id,title,tag_text so they can be reloaded without parsing."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame(
        [{"id": item.id, "title": item.title, "tag_text": item.tag_text} for item in items],
        columns=["id", "title", "tag_text"],
    )
    df.to_csv(path, index=False)
    logger.info(f"Saved {len(df)} items to {path}")


if __name__ == "__main__":
    configure_logging("data_pipeline.log")
    logging.info("Starting data pipeline...")

    build_processed_corpus(RAW_MOVIES_CSV, RAW_CREDITS_CSV, PROCESSED_DATA_DIR / "items.csv")

    logging.info("Data pipeline finished successfully!")
