"""
story_builder.py  – turns a folder of media into a story list

Images and .txt files get the default story length; videos are probed once
with PyAV and the result is kept in `.story_cache.json`, keyed by file name
and invalidated by mtime.
"""
from __future__ import annotations
import os, re, json, time, logging, pathlib, typing as _t

import av
import numpy as np

import config
from story_sequence import StoryItem

log = logging.getLogger(__name__)

CACHE_NAME = ".story_cache.json"

_IMAGE_EXT = (".png", ".jpg", ".jpeg", ".bmp", ".gif", ".webp")
_VIDEO_EXT = (".mp4", ".mkv", ".avi", ".mov", ".webm")
_TEXT_EXT  = (".txt",)

# ---------- natural sort --------------------------------------------------
def _nat_key(s: str) -> list[_t.Union[int, str]]:
    return [int(t) if t.isdigit() else t.lower()
            for t in re.split(r"(\d+)", s)]

# ---------- probe ---------------------------------------------------------
def probe_seconds(fp: str) -> float:
    """Best-effort clip length in seconds (0.0 on failure)."""
    try:
        with av.open(fp) as c:
            vs = next((s for s in c.streams if s.type == "video"), None)
            if vs is None:
                return 0.0

            if vs.duration and vs.time_base:
                return float(vs.duration * vs.time_base)
            if c.duration:
                return c.duration / av.time_base
            if vs.frames and vs.average_rate:
                return vs.frames / float(vs.average_rate)

            # brute-force last frame
            last_pts = None
            for f in c.decode(video=vs.index):
                last_pts = f.pts
            if last_pts is not None and vs.time_base:
                return float(last_pts * vs.time_base)
    except Exception as exc:
        log.warning("cannot probe %s: %s", fp, exc)
    return 0.0


def poster_frame(fp: str) -> np.ndarray | None:
    """First decodable frame of a video as an HxWx3 uint8 array."""
    try:
        with av.open(fp) as c:
            for frame in c.decode(video=0):
                return frame.to_ndarray(format="rgb24")
    except Exception as exc:
        log.warning("no poster frame for %s: %s", fp, exc)
    return None

# ---------- cache ---------------------------------------------------------
def _load_cache(cache_path: str) -> dict:
    try:
        with open(cache_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return data.get("stories", {})
    except (OSError, ValueError):
        return {}


def _write_cache(cache_path: str, entries: dict) -> None:
    data = {"generated": time.time(), "stories": entries}
    try:
        pathlib.Path(cache_path).write_text(json.dumps(data, indent=2))
    except OSError as exc:
        log.warning("cache not written (%s)", exc)

# ---------- builder -------------------------------------------------------
def _entry_for(fp: str, name: str, cached: dict | None) -> dict | None:
    mtime = os.path.getmtime(fp)
    if cached and cached.get("mtime") == mtime:
        return cached

    low = name.lower()
    if low.endswith(_VIDEO_EXT):
        dur = probe_seconds(fp)
        if dur <= 0:
            log.warning("  ! skipping unreadable file: %s", fp)
            return None
        return {"kind": "video", "duration": dur, "mtime": mtime}
    if low.endswith(_IMAGE_EXT):
        return {"kind": "image", "duration": config.DEFAULT_STORY_SEC, "mtime": mtime}
    if low.endswith(_TEXT_EXT):
        try:
            text = pathlib.Path(fp).read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError) as exc:
            log.warning("  ! skipping unreadable file: %s (%s)", fp, exc)
            return None
        return {"kind": "text", "duration": config.DEFAULT_STORY_SEC,
                "text": text, "mtime": mtime}
    return None


def build_cache(stories_path: str, cache_path: str | None = None) -> dict:
    """Scan *stories_path* and return {file name: entry}, refreshing the cache."""
    if cache_path is None:
        cache_path = os.path.join(stories_path, CACHE_NAME)

    log.info("[story_builder] scanning %s …", stories_path)
    old = _load_cache(cache_path)
    names = sorted((n for n in os.listdir(stories_path)
                    if os.path.isfile(os.path.join(stories_path, n))
                    and n != CACHE_NAME),
                   key=_nat_key)

    entries: dict[str, dict] = {}
    for name in names:
        rec = _entry_for(os.path.join(stories_path, name), name, old.get(name))
        if rec:
            entries[name] = rec

    _write_cache(cache_path, entries)
    log.info("[story_builder] %d stories, cache → %s", len(entries), cache_path)
    return entries


def build_stories(stories_path: str | None = None) -> list[StoryItem]:
    root = stories_path or config.STORIES_PATH
    items: list[StoryItem] = []
    for name, rec in build_cache(root).items():
        fp = os.path.join(root, name)
        if rec["kind"] == "video":
            items.append(StoryItem.page_video(fp, duration=rec["duration"]))
        elif rec["kind"] == "image":
            items.append(StoryItem.page_image(fp, duration=rec["duration"]))
        else:
            items.append(StoryItem.text(rec["text"], duration=rec["duration"]))
    return items


# -------------------------------------------------------------------------
if __name__ == "__main__":
    import argparse
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    ap = argparse.ArgumentParser(description="Rebuild story cache")
    ap.add_argument("root", nargs="?", default=config.STORIES_PATH,
                    help=f"story folder (default: ./{config.STORIES_PATH})")
    args = ap.parse_args()

    for name, rec in build_cache(args.root).items():
        print(f"{rec['kind']:>5}  {rec['duration']:7.2f}s  {name}")
