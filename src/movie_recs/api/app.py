import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Query

from movie_recs.config import LOGS_DIR, find_movies_csv
from movie_recs.data.make_dataset import load_corpus
from movie_recs.exceptions import RecommenderError, UnknownItemError, UnknownTitleError
from movie_recs.models.content_based.recommender import RecommenderIndex

LOGS_DIR.mkdir(parents=True, exist_ok=True)

logging.basicConfig(
    filename=LOGS_DIR / "api.log",
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("movie_recs_api")
logger.addHandler(logging.StreamHandler())  # also log to console

app = FastAPI(
    title="Movie Recommendation API",
    description="Content-based recommendations from bag-of-words tag vectors",
    version="2.0",
)


def safe_build_index() -> Optional[RecommenderIndex]:
    movies_path = find_movies_csv()
    if movies_path is None:
        logger.warning("No movies CSV found; content-based endpoints will return 503")
        return None
    try:
        index = RecommenderIndex.build(load_corpus(movies_path))
    except (OSError, RecommenderError) as e:
        logger.warning(f"Failed to build index from {movies_path}: {e}")
        return None
    logger.info(f"Index built from {movies_path} ({len(index)} items, {len(index.vocabulary)} terms)")
    return index


recommender_index = safe_build_index()


def _require_index() -> RecommenderIndex:
    if recommender_index is None:
        raise HTTPException(status_code=503, detail="Content-based index not loaded.")
    return recommender_index


@app.get("/")
async def root():
    return {
        "message": "Movie Recommendation API",
        "models": {
            "cb_loaded": recommender_index is not None,
            "items": len(recommender_index) if recommender_index is not None else 0,
            "vocabulary_size": len(recommender_index.vocabulary) if recommender_index is not None else 0,
        },
    }


@app.get("/recommend/content/")
async def recommend_content(
    movie_id: Optional[int] = Query(None),
    title: Optional[str] = Query(None),
    top_n: int = Query(10, ge=1, le=100),
):
    index = _require_index()

    if movie_id is None and title is None:
        raise HTTPException(status_code=400, detail="Provide either movie_id or title.")

    try:
        if movie_id is not None:
            query = index.get_item(movie_id)
            results = index.similar_items(movie_id, top_n)
        else:
            query = index.items[index.row_for_title(title)]
            results = index.similar_to_title(title, top_n)
    except UnknownItemError:
        raise HTTPException(status_code=404, detail=f"Movie ID {movie_id} not found.")
    except UnknownTitleError:
        suggestions = index.find_close_titles(title)
        detail = f"Title '{title}' not found."
        if suggestions:
            detail += f" Did you mean: {', '.join(suggestions)}?"
        raise HTTPException(status_code=404, detail=detail)

    recs = [
        {"id": item.id, "title": item.title, "score": round(score, 4)}
        for item, score in results
    ]
    return {"query": {"id": query.id, "title": query.title}, "recommendations": recs}


@app.get("/tokens/top")
async def top_tokens(n: int = Query(20, ge=1, le=1000)):
    index = _require_index()
    return {"tokens": [{"token": term, "count": count} for term, count in index.top_tokens(n)]}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("movie_recs.api.app:app", host="0.0.0.0", port=8000, reload=True)
