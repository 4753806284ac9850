"""Preview server for Revelry decks.

Serves the built deck with live reload while the author edits slides:
- Injects a reload script into HTML responses.
- Watches the project directory and rebuilds on change.
- Tells connected browsers to reload after a successful rebuild.

A failed rebuild is reported and the previous output keeps being served.

Key classes:
- DevServer: Main class for running the preview server.
- _ReloadHandler: HTTP request handler that injects the reload script.
- _ChangeHandler: File system event handler for triggering rebuilds.
"""

from __future__ import annotations

import asyncio
import functools
import json
import threading
import time
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import websockets
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .build import DEFAULT_TARGET, build_site
from .errors import BuildError

DEFAULT_PORT = 8000

# Never trigger rebuilds from these directories.
_IGNORED_PARTS = {".git", "node_modules", "__pycache__"}


class _ReloadHandler(SimpleHTTPRequestHandler):
    """HTTP request handler that injects the live reload script into HTML pages."""

    reload_script_template = """
    <script>
    (() => {{
      const ws = new WebSocket('ws://' + location.hostname + ':{ws_port}');
      ws.onmessage = (event) => {{
        const data = JSON.parse(event.data || '{{}}');
        if (data.type === 'reload') location.reload();
      }};
    }})();
    </script>
    """
    reload_script = reload_script_template.format(ws_port=DEFAULT_PORT + 1)

    def end_headers(self):
        self.send_header("Cache-Control", "no-cache, no-store, must-revalidate")
        super().end_headers()

    def send_head(self):
        path = Path(self.translate_path(self.path))
        if path.is_dir():
            path = path / "index.html"
        if path.suffix != ".html" or not path.is_file():
            return super().send_head()

        content = path.read_text(encoding="utf-8")
        if "</body>" in content:
            content = content.replace("</body>", f"{self.reload_script}</body>")
        else:
            content += self.reload_script
        encoded = content.encode("utf-8")
        self.send_response(200)
        self.send_header("Content-type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(encoded)))
        self.end_headers()
        self.wfile.write(encoded)
        return None


class DevServer:
    """Preview server with live reload.

    Attributes:
        project_root: Root directory of the project.
        output_dir: Directory the deck is built into and served from.
        http_port: Port for the HTTP server.
        ws_port: Port for WebSocket connections.
    """

    def __init__(
        self,
        project_root: Path,
        http_port: int | None = None,
        ws_port: int | None = None,
        target: str | None = None,
    ):
        """Initialize the preview server.

        Args:
            project_root: Root directory of the project.
            http_port: HTTP port; defaults to 8000.
            ws_port: WebSocket port; defaults to the HTTP port plus one.
            target: Output directory, relative to the project root.
        """
        self.project_root = project_root
        self.target = target or DEFAULT_TARGET
        self.output_dir = project_root / self.target
        self.http_port = int(http_port or DEFAULT_PORT)
        self.ws_port = ws_port if ws_port is not None else self.http_port + 1
        self._reload_script = _ReloadHandler.reload_script_template.format(ws_port=self.ws_port)
        self._observer: Observer | None = None
        self._ws_clients: set = set()
        self._loop = asyncio.new_event_loop()
        self._rebuilding = False
        self._last_rebuild_at = 0.0
        self._last_signature: tuple | None = None
        self._debounce_seconds = 0.05

    def start(self) -> None:  # pragma: no cover - integration path
        self._build()
        self._last_signature = self._compute_signature()
        threading.Thread(target=self._start_http, daemon=True).start()
        threading.Thread(target=self._start_ws, daemon=True).start()
        self._start_watcher()
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            self.stop()

    def stop(self) -> None:
        if self._observer:
            self._observer.stop()
            self._observer.join()
        self._loop.call_soon_threadsafe(self._loop.stop)

    def _build(self) -> bool:
        """Build the deck, reporting failures instead of raising them."""
        try:
            build_site(self.project_root, target=self.target)
        except BuildError as exc:
            print(f"Build failed: {exc}")
            return False
        return True

    def _start_http(self) -> None:  # pragma: no cover - integration path
        handler_cls = type(
            "_ReloadHandlerWithPort",
            (_ReloadHandler,),
            {"reload_script": self._reload_script},
        )
        handler = functools.partial(handler_cls, directory=str(self.output_dir))
        httpd = ThreadingHTTPServer(("", self.http_port), handler)
        print(f"Serving {self.output_dir} at http://localhost:{self.http_port}")
        httpd.serve_forever()

    def _start_ws(self) -> None:  # pragma: no cover - integration path
        asyncio.set_event_loop(self._loop)
        try:
            self._loop.run_until_complete(self._run_ws_server())
        except OSError as exc:
            print(f"WebSocket server failed to start (port {self.ws_port}): {exc}")

    async def _run_ws_server(self) -> None:  # pragma: no cover - integration path
        async with websockets.serve(self._ws_handler, "0.0.0.0", self.ws_port):
            await asyncio.Future()

    async def _ws_handler(self, websocket):
        self._ws_clients.add(websocket)
        try:
            await websocket.wait_closed()
        finally:
            self._ws_clients.discard(websocket)

    def _broadcast_reload(self):
        message = json.dumps({"type": "reload"})
        asyncio.run_coroutine_threadsafe(self._async_broadcast(message), self._loop)

    async def _async_broadcast(self, message: str):
        stale = set()
        for ws in self._ws_clients:
            try:
                await ws.send(message)
            except Exception:
                stale.add(ws)
        for ws in stale:
            self._ws_clients.discard(ws)

    def _start_watcher(self) -> None:  # pragma: no cover - integration path
        observer = Observer()
        observer.schedule(_ChangeHandler(self), str(self.project_root), recursive=True)
        observer.start()
        self._observer = observer

    def is_ignored(self, path: Path) -> bool:
        """Return True for paths whose changes must not trigger a rebuild."""
        if path == self.output_dir or self.output_dir in path.parents:
            return True
        try:
            rel = path.relative_to(self.project_root)
        except ValueError:
            return True
        return bool(_IGNORED_PARTS.intersection(rel.parts))

    def rebuild(self) -> None:
        now = time.time()
        if self._rebuilding or (now - self._last_rebuild_at) < self._debounce_seconds:
            return
        signature = self._compute_signature()
        if signature == self._last_signature:
            return
        self._rebuilding = True
        try:
            print("Change detected; rebuilding...")
            if self._build():
                self._broadcast_reload()
            self._last_signature = signature
        finally:
            self._rebuilding = False
            self._last_rebuild_at = time.time()

    def _compute_signature(self) -> tuple:
        entries: list[tuple] = []
        for path in sorted(self.project_root.rglob("*")):
            if path.is_dir() or self.is_ignored(path):
                continue
            try:
                stat = path.stat()
            except OSError:
                continue
            rel = path.relative_to(self.project_root)
            entries.append((str(rel), stat.st_mtime_ns, stat.st_size))
        return tuple(entries)


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, server: DevServer):
        super().__init__()
        self.server = server

    def on_any_event(self, event):
        if event.is_directory:
            return
        if self.server.is_ignored(Path(event.src_path)):
            return
        self.server.rebuild()
