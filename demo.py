#!/usr/bin/env python3
"""
Walkthrough of the Lyric Pad API.
Creates a song, branches a version, cleans it up and prints the analysis.
"""

import asyncio
import sys
from typing import Any, Dict

import httpx


API_BASE = "http://localhost:8000/lyric_pad"

DRAFT = """  Under the city light   we dream
we dream of a beautiful end,
under the city light we dream


and the storm   will pass again  """


def print_section(title: str):
    """Print a formatted section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70 + "\n")


def print_step(step_num: int, description: str):
    """Print a formatted step."""
    print(f"Step {step_num}: {description}")


async def check_api_running() -> bool:
    """Check if the API server is running."""
    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(f"{API_BASE}/session", timeout=2.0)
            return response.status_code == 200
    except httpx.HTTPError:
        return False


async def call(method: str, path: str, body: Dict[str, Any] | None = None) -> Dict[str, Any]:
    async with httpx.AsyncClient() as client:
        response = await client.request(method, f"{API_BASE}{path}", json=body, timeout=10.0)
        response.raise_for_status()
        if response.status_code == 204:
            return {}
        return response.json()


async def main():
    """Run the demo."""
    print_section("Lyric Pad Demo")

    print_step(1, "Checking if API server is running...")
    if not await check_api_running():
        print("❌ ERROR: API server is not running!")
        print("\nPlease start the API server in a separate terminal:")
        print("  uvicorn lyric_pad.main:app --reload")
        sys.exit(1)
    print("✓ API server is running\n")

    print_step(2, "Creating a song...")
    created = await call("POST", "/songs")
    song_id = created["song"]["id"]
    first_version = created["selection"]["activeVersionId"]
    await call("PUT", f"/songs/{song_id}", {"title": "City Light"})
    print(f"✓ Created song: City Light (ID: {song_id})")

    print_step(3, "Writing a first draft...")
    await call("PUT", f"/songs/{song_id}/versions/{first_version}/lyrics", {"lyrics": DRAFT})
    print("✓ Draft saved")

    print_step(4, "Branching a second version and cleaning it...")
    branched = await call("POST", f"/songs/{song_id}/versions")
    print(f"✓ Created {branched['version']['name']} from the draft")
    for action in ("trim-whitespace", "remove-empty-lines", "collapse-spaces"):
        result = await call("POST", f"/session/clean/{action}")
        print(f"  ✓ {action}")
    print("\n" + result["version"]["lyrics"] + "\n")

    print_step(5, "Analyzing the cleaned version...")
    report = await call("GET", "/session/analysis")
    print(f"  Words: {report['wordCount']} ({report['uniqueWords']} unique)")
    print(f"  Lines: {report['lineCount']}  lengths: {report['lineLengths']}")
    print(f"  Tone: +{report['tone']['positive']} / -{report['tone']['negative']}")
    for phrase in report["repeatedPhrases"]:
        print(f"    '{phrase['phrase']}' x{phrase['count']}")

    print_section("Demo Complete!")
    session = await call("GET", "/session")
    print(f"  • Song ID: {song_id}")
    print(f"  • Versions: {len(session['song']['versions'])}")
    print(f"  • Saved: {'✓' if session['saved'] else '⚠ changes only in memory'}")
    print("\nAPI docs: http://localhost:8000/docs\n")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n\nDemo interrupted by user.")
        sys.exit(0)
    except httpx.HTTPError as e:
        print(f"\n\n❌ Error: {e}")
        sys.exit(1)
