"""
FastAPI server for the moodverse service.

This module exposes the session host over HTTP: one endpoint per user action,
a read endpoint for the current view, and a Server-Sent Events stream that
pushes a fresh view after every change.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from .config import Settings, get_settings
from .corpus import load_corpus
from .models import CanonicalMood, Mode, SessionView
from .moods import MOODS
from .preferences import FileBackend, PreferenceStore
from .store import SessionHost

logger = logging.getLogger(__name__)


# API Request Schemas
class MoodSelection(BaseModel):
    """Payload for mood selection requests."""

    mood: str = Field(..., description="Canonical or raw mood key")


class ThemeUpdate(BaseModel):
    """Payload for theme updates."""

    dark_mode: bool = Field(..., description="Whether the dark theme is on")


class ErrorEvent(BaseModel):
    """Payload of an SSE error event."""

    error: str


def build_host(settings: Settings) -> SessionHost:
    """Create a session host backed by the configured corpus and data dir."""
    return SessionHost(
        load_corpus(settings.corpus_path),
        PreferenceStore(FileBackend(settings.data_dir)),
        transition_delay=settings.transition_delay,
    )


def create_app(host: SessionHost) -> FastAPI:
    """
    Create a FastAPI application serving the given session.

    Args:
        host: The SessionHost instance to use for the application

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Record the visit when the session starts."""
        view = await host.start()
        logger.info("Session started, streak is %d", view.streak)
        yield

    app = FastAPI(
        title="moodverse",
        description="Scripture for the way you feel",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.get("/")
    async def root() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "moodverse"}

    @app.get("/moods")
    async def list_moods() -> list[CanonicalMood]:
        """The moods offered in the picker, in display order."""
        return list(MOODS)

    @app.get("/session")
    async def get_session() -> SessionView:
        """Get the current session view."""
        return await host.read()

    @app.post("/session/mood")
    async def select_mood(selection: MoodSelection) -> SessionView:
        """
        Pick a mood and show a random verse for it.

        Raises:
            HTTPException: 404 if there is no verse for the mood
        """
        if not await host.select_mood(selection.mood):
            current = await host.read()
            if current.mode is not Mode.PICKER:
                raise HTTPException(
                    status_code=409, detail="A mood is already selected"
                )
            raise HTTPException(
                status_code=404, detail=f"No verse found for mood {selection.mood!r}"
            )
        return await host.read()

    @app.post("/session/next")
    async def next_verse() -> SessionView:
        """Show another verse for the active mood. Ignored mid-transition."""
        await host.request_next()
        return await host.read()

    @app.post("/session/back")
    async def back() -> SessionView:
        await host.back()
        return await host.read()

    @app.post("/session/favorites/open")
    async def open_favorites() -> SessionView:
        await host.open_favorites()
        return await host.read()

    @app.post("/session/favorites/close")
    async def close_favorites() -> SessionView:
        await host.close_favorites()
        return await host.read()

    @app.post("/session/favorite")
    async def toggle_favorite() -> SessionView:
        """
        Add or remove the displayed verse from favorites.

        Raises:
            HTTPException: 409 if no verse is displayed
        """
        if await host.toggle_favorite() is None:
            raise HTTPException(status_code=409, detail="No verse is displayed")
        return await host.read()

    @app.put("/session/theme")
    async def set_theme(update: ThemeUpdate) -> SessionView:
        await host.set_dark_mode(update.dark_mode)
        return await host.read()

    @app.get("/session/stream")
    async def stream_session() -> StreamingResponse:
        """
        Stream session views via Server-Sent Events.

        The current view is sent immediately upon connection, then one event
        per change.

        Returns:
            StreamingResponse with text/event-stream content type
        """

        async def event_generator() -> AsyncGenerator[str, None]:
            """Generate SSE events for session changes."""
            try:
                async with host.stream() as view_stream:
                    async for view in view_stream:
                        data = view.model_dump_json(by_alias=True)
                        yield f"data: {data}\n\n"
            except asyncio.CancelledError:
                # Client disconnected
                pass
            except Exception as e:
                logger.exception("Session stream failed")
                error_data = ErrorEvent(error=str(e)).model_dump_json()
                yield f"event: error\ndata: {error_data}\n\n"

        return StreamingResponse(
            event_generator(),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Headers": "*",
            },
        )

    return app


# Default app instance for uvicorn
app = create_app(build_host(get_settings()))


def main() -> None:
    """Main entry point for the server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "moodverse.server:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()
