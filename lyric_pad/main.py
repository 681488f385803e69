from fastapi import FastAPI
from lyric_pad.core.logging_config import configure_logging
from lyric_pad.api.routers.songs import router as songs_router
from lyric_pad.api.routers.versions import router as versions_router
from lyric_pad.api.routers.session import router as session_router
from lyric_pad.api.routers.analysis import router as analysis_router

configure_logging()

app = FastAPI(title="Lyric Pad")

app.include_router(songs_router, prefix="/lyric_pad/songs", tags=["songs"])
app.include_router(versions_router, prefix="/lyric_pad/songs", tags=["versions"])
app.include_router(session_router, prefix="/lyric_pad/session", tags=["session"])
app.include_router(analysis_router, prefix="/lyric_pad", tags=["analysis"])
