"""HTTP endpoints for recommendations and similar items."""
import azure.functions as func
import logging
import json
from typing import List

from movie_recommendation_service.services import build_recommendation_service
from movie_recommendation_service.types import CatalogItem

# Initialize blueprint
bp = func.Blueprint()

# Initialize service (singleton pattern)
recommendation_service = build_recommendation_service()

logger = logging.getLogger(__name__)

MAX_LIMIT = 50


def _json_response(body: dict, status_code: int = 200) -> func.HttpResponse:
    return func.HttpResponse(
        json.dumps(body, default=str),
        status_code=status_code,
        mimetype="application/json"
    )


def _parse_limit(req: func.HttpRequest, default: int) -> int:
    """Read and validate the ``limit`` query parameter (raises ValueError)."""
    try:
        limit = int(req.params.get('limit', default))
    except (TypeError, ValueError):
        raise ValueError("limit must be an integer")

    if limit < 1 or limit > MAX_LIMIT:
        raise ValueError(f"limit must be between 1 and {MAX_LIMIT}")
    return limit


def _serialize(items: List[CatalogItem]) -> List[dict]:
    return [item.to_dict() for item in items]


@bp.route(route="recommendations", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
async def get_recommendations(req: func.HttpRequest) -> func.HttpResponse:
    """
    Get personalized recommendations.

    Query Parameters:
        - user_id: User to recommend for (omit for anonymous/popular items)
        - limit: Number of items (default: 10, max: 50)
    """
    try:
        try:
            limit = _parse_limit(req, default=10)
        except ValueError as e:
            return _json_response({"error": str(e)}, status_code=400)

        user_id = req.params.get('user_id') or None
        items = await recommendation_service.recommend(user_id, limit)

        return _json_response({
            "user_id": user_id,
            "count": len(items),
            "recommendations": _serialize(items)
        })

    except Exception as e:
        logger.error(f"Error getting recommendations: {str(e)}", exc_info=True)
        return _json_response({"error": "Internal server error"}, status_code=500)


@bp.route(route="movies/{movie_id}/similar", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
async def get_similar_movies(req: func.HttpRequest) -> func.HttpResponse:
    """
    Get items similar to a movie.

    Query Parameters:
        - limit: Number of items (default: 6, max: 50)
    """
    try:
        movie_id = req.route_params.get('movie_id')

        if not movie_id:
            return _json_response({"error": "movie_id is required"}, status_code=400)

        try:
            movie_id = int(movie_id)
        except ValueError:
            return _json_response({"error": "movie_id must be an integer"}, status_code=400)

        try:
            limit = _parse_limit(req, default=6)
        except ValueError as e:
            return _json_response({"error": str(e)}, status_code=400)

        items = await recommendation_service.similar_to(movie_id, limit)

        return _json_response({
            "movie_id": movie_id,
            "count": len(items),
            "similar": _serialize(items)
        })

    except Exception as e:
        logger.error(f"Error getting similar movies: {str(e)}", exc_info=True)
        return _json_response({"error": "Internal server error"}, status_code=500)


@bp.route(route="recommendations/trending", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
async def get_trending(req: func.HttpRequest) -> func.HttpResponse:
    """Most viewed items added in the last 30 days."""
    try:
        try:
            limit = _parse_limit(req, default=10)
        except ValueError as e:
            return _json_response({"error": str(e)}, status_code=400)

        items = await recommendation_service.trending(limit)
        return _json_response({"count": len(items), "movies": _serialize(items)})

    except Exception as e:
        logger.error(f"Error getting trending movies: {str(e)}", exc_info=True)
        return _json_response({"error": "Internal server error"}, status_code=500)


@bp.route(route="recommendations/new-releases", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
async def get_new_releases(req: func.HttpRequest) -> func.HttpResponse:
    """Items added in the last 7 days, newest first."""
    try:
        try:
            limit = _parse_limit(req, default=10)
        except ValueError as e:
            return _json_response({"error": str(e)}, status_code=400)

        items = await recommendation_service.new_releases(limit)
        return _json_response({"count": len(items), "movies": _serialize(items)})

    except Exception as e:
        logger.error(f"Error getting new releases: {str(e)}", exc_info=True)
        return _json_response({"error": "Internal server error"}, status_code=500)


# noinspection PyUnusedLocal
@bp.route(route="recommendations/health", methods=["GET"])
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint."""
    return _json_response({
        "status": "healthy",
        "service": "movie-recommendation-service",
        "version": "1.0.0"
    })
