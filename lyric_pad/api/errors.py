from fastapi import HTTPException
from fastapi import status as http

from lyric_pad.core.errors import InvalidArgument, LyricPadError, NotFound


def http_error(e: LyricPadError) -> HTTPException:
    """Map a store error onto the HTTP status the routers answer with."""
    if isinstance(e, NotFound):
        return HTTPException(http.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, InvalidArgument):
        return HTTPException(http.HTTP_400_BAD_REQUEST, detail=str(e))
    return HTTPException(http.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
