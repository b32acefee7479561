"""WSGI access-log middleware — one record per completed response."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait

from log_store import LogStore
from models import LogEntry, sanitize_agent, utc_timestamp

logger = logging.getLogger("access")


def _resource(environ) -> str:
    """Raw request target: path plus query string, as the client sent it."""
    raw = environ.get("RAW_URI") or environ.get("REQUEST_URI")
    if raw:
        return raw
    path = environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", "")
    query = environ.get("QUERY_STRING", "")
    return f"{path}?{query}" if query else (path or "/")


class _CompletionObserver:
    """Wraps a response body and fires *callback* once the body was fully sent.

    The WSGI server calls close() after writing the last chunk. If the body was
    not iterated to the end (client went away, write error) nothing fires.
    """

    def __init__(self, app_iter, callback):
        self._app_iter = app_iter
        self._callback = callback
        self._exhausted = False
        self._fired = False

    def __iter__(self):
        for chunk in self._app_iter:
            yield chunk
        self._exhausted = True

    def close(self):
        try:
            close = getattr(self._app_iter, "close", None)
            if close is not None:
                close()
        finally:
            if self._exhausted and not self._fired:
                self._fired = True
                self._callback()


class AccessLogMiddleware:
    """Records an access log entry for every request the wrapped app serves.

    Usage: ``app.wsgi_app = AccessLogMiddleware(app.wsgi_app, store)``.
    Appends run on a background executor; with one worker it doubles as a
    serializing write queue. The request pipeline never waits on log I/O.
    """

    def __init__(self, wsgi_app, store: LogStore, workers: int = 1):
        self._wsgi_app = wsgi_app
        self._store = store
        self._executor = ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="access-log-writer"
        )
        self._pending = set()
        self._pending_lock = threading.Lock()

    def __call__(self, environ, start_response):
        state = {}

        def _start_response(status, headers, exc_info=None):
            state["status"] = int(status.split(" ", 1)[0])
            return start_response(status, headers, exc_info)

        def _on_complete():
            self._record(environ, state.get("status"))

        app_iter = self._wsgi_app(environ, _start_response)
        return _CompletionObserver(app_iter, _on_complete)

    def _record(self, environ, status):
        entry = LogEntry(
            agent=sanitize_agent(environ.get("HTTP_USER_AGENT")),
            time=utc_timestamp(),
            method=environ.get("REQUEST_METHOD", ""),
            resource=_resource(environ),
            version=environ.get("SERVER_PROTOCOL", ""),
            status=status,
        )
        logger.info(entry.to_line().rstrip("\n"))
        self.submit(entry)

    def submit(self, entry: LogEntry):
        """Queue *entry* for appending and return immediately."""
        future = self._executor.submit(self._store.append, entry)
        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._on_written)
        return future

    def _on_written(self, future):
        with self._pending_lock:
            self._pending.discard(future)
        exc = future.exception()
        if exc is not None:
            logger.error("Error writing to log file %s: %s", self._store.path, exc)

    def drain(self, timeout=None) -> bool:
        """Block until every queued append has finished. Returns False on timeout."""
        with self._pending_lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self):
        self.drain()
        self._executor.shutdown(wait=True)
