"""One-shot local HTTP listener for the OAuth redirect.

Spotify sends the browser back to the configured redirect URI with either
``?code=...`` or ``?error=...``. We bind a tiny HTTP server on that URI's
host/port, open the consent page, and block until the first request on the
redirect path arrives. The server socket is closed before returning or
raising, whatever the outcome.
"""

import html
import logging
import urllib.parse
import webbrowser
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Callable, Dict, Optional, Tuple

from utils.logger import log_info, log_warning

from .auth import extract_code_from_redirect_url
from .errors import AuthDeniedError, NoCodeError

logger = logging.getLogger(__name__)

DEFAULT_CALLBACK_PORT = 8888

_PAGE = """<html>
<head><title>{title}</title></head>
<body style="font-family: Arial, sans-serif; text-align: center; margin-top: 50px;">
    <h1 style="color: {color};">{title}</h1>
    <p>{message}</p>
</body>
</html>
"""


def redirect_bind_address(redirect_uri: str) -> Tuple[str, int, str]:
    """Return (host, port, path) to listen on for a redirect URI."""

    parsed = urllib.parse.urlparse(str(redirect_uri or "").strip())
    host = parsed.hostname or "127.0.0.1"
    port = parsed.port or DEFAULT_CALLBACK_PORT
    path = parsed.path or "/"
    return host, port, path


class _CallbackHandler(BaseHTTPRequestHandler):
    server: "_CallbackServer"

    def do_GET(self):
        parsed = urllib.parse.urlparse(self.path)
        if parsed.path != self.server.callback_path:
            self._respond(404, "Not Found", "Nothing to see here.", "#888888")
            return

        params = extract_code_from_redirect_url(self.path)
        self.server.result = params

        if params.get("error"):
            self._respond(
                400,
                "Authorization Failed",
                f"Error: {html.escape(params['error'])}. You can close this tab.",
                "#E22134",
            )
        elif params.get("code"):
            self._respond(200, "Authorization Successful!", "You can close this tab and return to the terminal.", "#1DB954")
        else:
            self._respond(400, "Authorization Failed", "No code found in query.", "#E22134")

    def _respond(self, status: int, title: str, message: str, color: str) -> None:
        body = _PAGE.format(title=title, message=message, color=color).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.send_header("Connection", "close")
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        logger.debug("callback server: " + format, *args)


class _CallbackServer(HTTPServer):
    def __init__(self, address: Tuple[str, int], callback_path: str):
        super().__init__(address, _CallbackHandler)
        self.callback_path = callback_path
        self.result: Optional[Dict[str, str]] = None


def _open_browser(auth_url: str, browser: Callable[[str], bool]) -> None:
    try:
        opened = browser(auth_url)
    except Exception as e:
        logger.debug("browser launch failed: %s", e)
        opened = False

    if not opened:
        log_info(f"Please open this URL manually in your browser:\n{auth_url}")


def wait_for_authorization_code(
    redirect_uri: str,
    auth_url: str,
    *,
    launch_browser: bool = True,
    browser: Callable[[str], bool] = webbrowser.open,
) -> str:
    """Serve the redirect URI until Spotify calls back, and return the code.

    Raises:
        AuthDeniedError: the redirect carried ?error=...
        NoCodeError: the redirect carried neither code nor error
    """

    host, port, path = redirect_bind_address(redirect_uri)
    server = _CallbackServer((host, port), path)
    try:
        log_info(f"Listening on {redirect_uri} for Spotify authorization...")
        if launch_browser:
            _open_browser(auth_url, browser)
        else:
            log_info(f"Open this URL in your browser to authorize:\n{auth_url}")

        while server.result is None:
            server.handle_request()
        result = server.result
    finally:
        server.server_close()

    if result.get("error"):
        log_warning(f"Spotify authorization was denied: {result['error']}")
        raise AuthDeniedError(f"Authorization failed: {result['error']}", details={"error": result["error"]})

    code = result.get("code")
    if not code:
        raise NoCodeError("No code found in query")

    return code
