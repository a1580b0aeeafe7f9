#!/usr/bin/env python3
"""
web_remote.py  –  web remote control + diagnostics for the story viewer

Endpoints
---------
/               → HTML page with buttons, live state, diagnostics, link to /log
/state          → JSON snapshot of the player (story, index, progress, state)
/diag, /data    → JSON object of diagnostic metrics
/action?cmd=…   → inject commands (play, pause, next, prev, info, quit)
/log            → contents of the runtime log (if present)
"""

from __future__ import annotations
import http.server
import socketserver
import threading
import urllib.parse
import json
import logging
import time
import os
import traceback
import psutil
import platform
from typing import TYPE_CHECKING, Any

from events import PlaybackState
import config

if TYPE_CHECKING:                       # avoid circular import at runtime
    from app import StoryViewer

log = logging.getLogger(__name__)

# ── diagnostics refresh cadence ───────────────────────────────────────────
_last_diag_time = 0.0
_diag_interval  = getattr(config, "DIAG_REFRESH_INTERVAL", 1.0)

# ── global diagnostic store ───────────────────────────────────────────────
monitor_data: dict[str, Any] = {
    "cpu_percent":       0.0,
    "mem_used":          "0 MB",
    "mem_total":         "0 MB",
    "script_uptime":     "0d 00:00:00",
    "load_avg":          "",
    "last_http_crash":   "",
    "python_version":    platform.python_version(),
}

_script_start = time.monotonic()

_COMMANDS = {
    "play":  PlaybackState.PLAY,
    "pause": PlaybackState.PAUSE,
    "next":  PlaybackState.NEXT,
    "prev":  PlaybackState.PREVIOUS,
}


# ── helpers ────────────────────────────────────────────────────────────────
def _fmt_duration(secs: float) -> str:
    d, rem = divmod(int(secs), 86400)
    h, rem = divmod(rem, 3600)
    m, s   = divmod(rem, 60)
    return f"{d}d {h:02}:{m:02}:{s:02}"


def _maybe_update_diagnostics() -> None:
    global _last_diag_time
    now = time.monotonic()
    if now - _last_diag_time >= _diag_interval:
        _last_diag_time = now
        _update_diagnostics()


def _update_diagnostics() -> None:
    """Refresh CPU, memory, uptime and load in `monitor_data`."""
    monitor_data["cpu_percent"] = psutil.cpu_percent()
    vm = psutil.virtual_memory()
    monitor_data["mem_used"]  = f"{vm.used // 1024**2} MB"
    monitor_data["mem_total"] = f"{vm.total // 1024**2} MB"
    monitor_data["script_uptime"] = _fmt_duration(time.monotonic() - _script_start)
    try:
        la = os.getloadavg()
        monitor_data["load_avg"] = ", ".join(f"{x:.2f}" for x in la)
    except (AttributeError, OSError):
        monitor_data["load_avg"] = "N/A"


def state_dict(viewer: "StoryViewer") -> dict[str, Any]:
    """JSON-ready view of what the player is showing."""
    player = viewer.player
    snap   = player.snapshot()
    return {
        "index":    snap.index,
        "count":    len(viewer.sequence),
        "state":    snap.state.value,
        "progress": round(snap.progress, 4),
        "duration": snap.item.duration,
        "story":    repr(snap.item.payload),
        "holding":  player.holding,
        "cycles":   player.cycles,
        "shown":    [it.shown for it in viewer.sequence],
    }


# ── reusable threaded HTTP server ──────────────────────────────────────────
class ReusableTCPServer(socketserver.ThreadingMixIn, http.server.HTTPServer):
    daemon_threads      = True
    allow_reuse_address = True


# ── request handler ────────────────────────────────────────────────────────
class RemoteHandler(http.server.BaseHTTPRequestHandler):
    def log_message(self, fmt, *args):
        log.debug("http %s", fmt % args)

    def do_GET(self):
        parsed = urllib.parse.urlparse(self.path)
        path, qs = parsed.path, parsed.query

        if path == "/":
            return self._serve_html()
        if path == "/state":
            return self._serve_json(state_dict(self.server.viewer))   # type: ignore
        if path in ("/diag", "/data"):
            _maybe_update_diagnostics()
            return self._serve_json(monitor_data)
        if path == "/log":
            return self._serve_log()
        if path == "/action":
            return self._serve_action(qs)

        self.send_error(404, "Not found")

    # ── helpers for each route ───────────────────────────────────────────
    def _serve_html(self):
        body = HTML_PAGE.encode("utf-8")
        self.send_response(200)
        self.send_header("Content-Type", "text/html")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _serve_json(self, obj: Any):
        b = json.dumps(obj).encode("utf-8")
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(b)))
        self.end_headers()
        self.wfile.write(b)

    def _serve_log(self):
        try:
            with open(config.LOG_FILE, "rb") as f:
                data = f.read()
        except OSError:
            return self.send_error(404, "Log file not found")
        self.send_response(200)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def _serve_action(self, query: str):
        qs = urllib.parse.parse_qs(query)
        cmd = qs.get("cmd", [""])[0]
        viewer = self.server.viewer                                 # type: ignore

        if cmd in _COMMANDS:
            viewer.channel.post(_COMMANDS[cmd])
        elif cmd == "info":
            viewer.post_action({"type": "toggle_overlay"})
        elif cmd == "quit":
            viewer.post_action({"type": "quit"})
        else:
            return self.send_error(400, "Unknown cmd")

        self.send_response(204)
        self.end_headers()


# ── simple HTML UI ─────────────────────────────────────────────────────────
HTML_PAGE = """
<!doctype html><html><head><meta charset="utf-8">
<title>Story Remote & Diagnostics</title>
<style>
 body{background:#000;color:#0f0;font-family:monospace;padding:1em;}
 button{margin:4px;padding:6px 12px;border:1px solid #0f0;
        background:#000;color:#0f0;font-family:monospace;}
 pre{margin:0.5em 0;font-family:monospace;}
</style></head><body>
<h2>Story Remote</h2>
<button onclick="send('prev')">◀ Previous</button>
<button onclick="send('pause')">❚❚ Pause</button>
<button onclick="send('play')">▶ Play</button>
<button onclick="send('next')">Next ▶</button>
<button onclick="send('info')">Toggle info</button>
<button onclick="send('quit')">Quit</button>
<a href="/log" style="color:#0f0">View log</a>

<div><h3>State</h3><pre id="state"></pre></div>
<div><h3>Diagnostics</h3><pre id="diag"></pre></div>

<script>
 function send(cmd){ fetch('/action?cmd=' + cmd); }
 function dump(obj){
   let txt = '';
   for (let [k,v] of Object.entries(obj)){
     txt += k.padEnd(20,' ') + v + '\\n';
   }
   return txt;
 }
 async function refreshUI(){
   try {
     let s = await fetch('/state'); document.getElementById('state').textContent = dump(await s.json());
     let d = await fetch('/diag');  document.getElementById('diag').textContent  = dump(await d.json());
   } catch(e){
     console.error(e);
   }
 }
 setInterval(refreshUI, 200);
 refreshUI();
</script>
</body></html>
"""


# ── server bootstrap with auto-restart ────────────────────────────────────
def start(viewer: "StoryViewer", port: int = getattr(config, "WEB_PORT", 8080)):
    def _serve_loop():
        while True:
            try:
                with ReusableTCPServer(("", port), RemoteHandler) as httpd:
                    httpd.viewer = viewer
                    httpd.serve_forever()
            except Exception:
                monitor_data["last_http_crash"] = traceback.format_exc()
                log.exception("web remote crashed; restarting")
                time.sleep(1)

    threading.Thread(target=_serve_loop, daemon=True).start()
    log.info("🌐 Web remote & diagnostics listening on port %d", port)
