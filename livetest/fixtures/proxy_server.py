#!/usr/bin/env python3
"""
Authenticating forward proxy used by adapter tests.

Plain HTTP requests in absolute form are forwarded with http.client;
CONNECT requests are tunnelled byte for byte. Every request must carry
Basic Proxy-Authorization matching the configured credentials.
"""
import argparse
import base64
import http.client
import http.server
import logging
import select
import socket
import sys
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

HOP_BY_HOP = {
    'connection', 'keep-alive', 'proxy-authenticate', 'proxy-authorization',
    'proxy-connection', 'te', 'trailers', 'transfer-encoding', 'upgrade',
}


def basic_credentials(user, password):
    token = base64.b64encode(f"{user}:{password}".encode('utf-8')).decode('ascii')
    return f"Basic {token}"


class ProxyHandler(http.server.BaseHTTPRequestHandler):
    server_version = 'livetest-proxy/0.1'
    timeout = 30

    def log_message(self, format, *args):
        logger.info("%s - %s", self.address_string(), format % args)

    def _authorized(self):
        expected = self.server.expected_authorization
        if expected is None:
            return True
        if self.headers.get('Proxy-Authorization') == expected:
            return True
        self.send_response(407)
        self.send_header('Proxy-Authenticate', 'Basic realm="livetest"')
        self.send_header('Content-Length', '0')
        self.end_headers()
        return False

    def do_CONNECT(self):
        if not self._authorized():
            return
        host, _, port = self.path.rpartition(':')
        try:
            upstream = socket.create_connection((host, int(port)), timeout=self.timeout)
        except (OSError, ValueError) as e:
            self.send_error(502, f"Cannot reach {self.path}: {e}")
            return

        self.send_response(200, 'Connection Established')
        self.end_headers()
        try:
            self._tunnel(self.connection, upstream)
        finally:
            upstream.close()
        self.close_connection = True

    def _tunnel(self, client, upstream):
        sockets = [client, upstream]
        while True:
            readable, _, errored = select.select(sockets, [], sockets, self.timeout)
            if errored or not readable:
                return
            for sock in readable:
                data = sock.recv(65536)
                if not data:
                    return
                other = upstream if sock is client else client
                other.sendall(data)

    def _forward(self):
        if not self._authorized():
            return
        parts = urlsplit(self.path)
        if parts.scheme != 'http' or not parts.hostname:
            self.send_error(400, "Proxy only accepts absolute http:// URLs")
            return

        length = int(self.headers.get('Content-Length') or 0)
        body = self.rfile.read(length) if length else None
        headers = {k: v for k, v in self.headers.items() if k.lower() not in HOP_BY_HOP}
        target = parts.path or '/'
        if parts.query:
            target += '?' + parts.query

        conn = http.client.HTTPConnection(parts.hostname, parts.port or 80, timeout=self.timeout)
        try:
            conn.request(self.command, target, body=body, headers=headers)
            response = conn.getresponse()
            payload = response.read()
        except OSError as e:
            self.send_error(502, f"Upstream request failed: {e}")
            return
        finally:
            conn.close()

        self.send_response(response.status, response.reason)
        for key, value in response.getheaders():
            if key.lower() not in HOP_BY_HOP and key.lower() not in ('content-length', 'server', 'date'):
                self.send_header(key, value)
        self.send_header('Content-Length', str(len(payload)))
        self.send_header('Via', '1.1 livetest-proxy')
        self.end_headers()
        if self.command != 'HEAD':
            self.wfile.write(payload)

    do_GET = _forward
    do_HEAD = _forward
    do_POST = _forward
    do_PUT = _forward
    do_PATCH = _forward
    do_DELETE = _forward
    do_OPTIONS = _forward


class ProxyServer(http.server.ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address, user=None, password=None):
        super().__init__(address, ProxyHandler)
        if user is None:
            self.expected_authorization = None
        else:
            self.expected_authorization = basic_credentials(user, password or '')


def make_server(port, host='127.0.0.1', user=None, password=None):
    """Create (but do not start) a proxy server"""
    return ProxyServer((host, port), user, password)


def main(argv=None):
    parser = argparse.ArgumentParser(description="livetest proxy server")
    parser.add_argument('--host', default='127.0.0.1')
    parser.add_argument('--port', type=int, required=True)
    parser.add_argument('--user', default=None)
    parser.add_argument('--password', default=None)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )

    server = make_server(args.port, args.host, args.user, args.password)
    logger.info(f"Proxy server listening on http://{args.host}:{args.port}")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
    return 0


if __name__ == '__main__':
    sys.exit(main())
