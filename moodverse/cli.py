"""
Command-line client for the moodverse service.
"""

import asyncio
import json
from collections.abc import Coroutine
from typing import Any

import httpx
import typer
from httpx_sse import ServerSentEvent, aconnect_sse

from .models import CanonicalMood, Mode, QuoteRecord, SessionView

DEFAULT_BASE_URL = "http://localhost:8000"

app = typer.Typer(help="moodverse CLI tools")

BaseUrl = typer.Option(
    DEFAULT_BASE_URL, "--url", "-u", help="Base URL of the moodverse service"
)


# MARK: - Commands


@app.command()
def moods(base_url: str = BaseUrl) -> None:
    """List the moods you can pick from."""

    async def _moods() -> None:
        async with httpx.AsyncClient() as client:
            response = await client.get(f"{base_url}/moods")
            response.raise_for_status()
            for raw in response.json():
                mood = CanonicalMood.model_validate(raw)
                print(f"{mood.icon}  {mood.label:<14} {mood.key}")

    _run_with_error_handling(_moods(), base_url)


@app.command()
def show(
    base_url: str = BaseUrl,
    json_output: bool = typer.Option(False, "--json", "-j", help="Output raw JSON"),
) -> None:
    """Show the current session."""

    async def _show() -> None:
        async with httpx.AsyncClient() as client:
            response = await client.get(f"{base_url}/session")
            response.raise_for_status()
            if json_output:
                print(json.dumps(response.json(), indent=2, ensure_ascii=False))
                return
            print(_format_view(SessionView.model_validate(response.json())))

    _run_with_error_handling(_show(), base_url)


@app.command()
def pick(
    mood: str = typer.Argument(..., help="Mood key, e.g. Anxious"),
    base_url: str = BaseUrl,
) -> None:
    """Pick a mood and get a verse for it."""
    _run_with_error_handling(
        _send("POST", f"{base_url}/session/mood", payload={"mood": mood}), base_url
    )


@app.command("next")
def next_verse(base_url: str = BaseUrl) -> None:
    """Get another verse for the current mood."""
    _run_with_error_handling(_send("POST", f"{base_url}/session/next"), base_url)


@app.command()
def back(base_url: str = BaseUrl) -> None:
    """Return to the mood picker."""
    _run_with_error_handling(_send("POST", f"{base_url}/session/back"), base_url)


@app.command()
def favorite(base_url: str = BaseUrl) -> None:
    """Add or remove the displayed verse from favorites."""
    _run_with_error_handling(_send("POST", f"{base_url}/session/favorite"), base_url)


@app.command()
def favorites(base_url: str = BaseUrl) -> None:
    """Open the favorites list."""
    _run_with_error_handling(
        _send("POST", f"{base_url}/session/favorites/open"), base_url
    )


@app.command()
def theme(
    dark: bool = typer.Option(..., "--dark/--light", help="Theme to switch to"),
    base_url: str = BaseUrl,
) -> None:
    """Switch between the light and dark theme."""
    _run_with_error_handling(
        _send("PUT", f"{base_url}/session/theme", payload={"dark_mode": dark}), base_url
    )


@app.command()
def stream(base_url: str = BaseUrl) -> None:
    """Follow session changes in real-time."""

    async def _stream() -> None:
        print(f"Streaming from {base_url}/session/stream... (Ctrl+C to stop)")

        async with httpx.AsyncClient(timeout=None) as client:
            async with aconnect_sse(
                client, "GET", f"{base_url}/session/stream"
            ) as event_source:
                async for sse in event_source.aiter_sse():
                    _handle_sse_event(sse)

    _run_with_error_handling(_stream(), base_url)


# MARK: - Private Helpers


async def _send(
    method: str, url: str, payload: dict[str, Any] | None = None
) -> None:
    """Issue one session action and print the resulting view."""
    async with httpx.AsyncClient() as client:
        response = await client.request(method, url, json=payload)
        if response.status_code in (404, 409):
            print(response.json().get("detail", "Request refused"))
            return
        response.raise_for_status()
        print(_format_view(SessionView.model_validate(response.json())))


def _format_quote(quote: QuoteRecord) -> str:
    return "\n".join(
        [
            quote.primary_text,
            "",
            f'"{quote.translation_a}"',
            "",
            quote.translation_b,
            "",
            f"  ({quote.citation})",
        ]
    )


def _format_view(view: SessionView) -> str:
    """Render a session view as plain text."""
    header = f"streak: {view.streak}  theme: {'dark' if view.dark_mode else 'light'}"

    if view.mode is Mode.FAVORITES:
        if not view.favorites:
            return f"{header}\n\nNo favorites yet"
        entries = [_format_quote(quote) for quote in view.favorites]
        return f"{header}\n\n" + "\n\n---\n\n".join(entries)

    if view.mode is Mode.QUOTE_VIEW and view.active_mood and view.current_quote:
        star = "★" if view.is_favorite else "☆"
        mood = f"{view.active_mood.icon} {view.active_mood.label} {star}"
        return f"{header}\n{mood}\n\n{_format_quote(view.current_quote)}"

    return f"{header}\n\nHow is your heart today? (moodverse moods)"


def _handle_sse_event(sse: ServerSentEvent) -> None:
    """Handle a single SSE event."""
    try:
        # Handle error events from server
        if sse.event == "error":
            error_data = json.loads(sse.data)
            print(f"Server error: {error_data.get('error', 'Unknown error')}")
            return

        view = SessionView.model_validate_json(sse.data)
        print(_format_view(view))
        print()

    except ValueError as e:
        print(f"Warning: Could not parse SSE data: {sse.data} - {e}")


def _run_with_error_handling(coro: Coroutine[Any, Any, Any], base_url: str) -> None:
    """Run an async coroutine with standardized error handling."""
    try:
        asyncio.run(coro)
    except KeyboardInterrupt:
        print("\nStopped")
        raise typer.Exit(0)
    except httpx.ConnectError:
        print(f"Error: Could not connect to {base_url}")
        raise typer.Exit(1)
    except httpx.HTTPStatusError as e:
        print(f"Error: HTTP {e.response.status_code}")
        raise typer.Exit(1)
    except Exception as e:
        error_msg = str(e) if str(e) else f"Unknown error of type {type(e).__name__}"
        print(f"Error: {error_msg}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
