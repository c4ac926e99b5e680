#!/usr/bin/env python3
"""
Live HTTP target server used by adapter tests.

Responds with a JSON description of each request so tests can assert on
what their transport actually sent.
"""
import argparse
import http.server
import json
import logging
import ssl
import sys
from urllib.parse import urlsplit, parse_qs

logger = logging.getLogger(__name__)


class TargetHandler(http.server.BaseHTTPRequestHandler):
    server_version = 'livetest-target/0.1'

    def log_message(self, format, *args):
        logger.info("%s - %s", self.address_string(), format % args)

    def _read_body(self):
        length = int(self.headers.get('Content-Length') or 0)
        return self.rfile.read(length) if length else b''

    def _send_json(self, status, payload):
        body = json.dumps(payload).encode('utf-8')
        self.send_response(status)
        self.send_header('Content-Type', 'application/json')
        self.send_header('Content-Length', str(len(body)))
        self.end_headers()
        if self.command != 'HEAD':
            self.wfile.write(body)

    def _echo(self, status=200):
        parts = urlsplit(self.path)
        body = self._read_body()
        self._send_json(status, {
            'method': self.command,
            'path': parts.path,
            'query': parse_qs(parts.query),
            'headers': dict(self.headers.items()),
            'body': body.decode('utf-8', errors='replace'),
        })

    def do_GET(self):
        path = urlsplit(self.path).path
        if path == '/redirect':
            self.send_response(302)
            self.send_header('Location', '/echo')
            self.send_header('Content-Length', '0')
            self.end_headers()
        elif path.startswith('/status/'):
            try:
                status = int(path.rsplit('/', 1)[1])
            except ValueError:
                status = 400
            if not 100 <= status <= 599:
                status = 400
            self._send_json(status, {'status': status})
        else:
            self._echo()

    do_HEAD = do_GET
    do_DELETE = _echo
    do_OPTIONS = _echo

    def do_POST(self):
        self._echo()

    do_PUT = do_POST
    do_PATCH = do_POST


def make_server(port, host='127.0.0.1', certfile=None, keyfile=None):
    """Create (but do not start) a target server, optionally over TLS"""
    server = http.server.ThreadingHTTPServer((host, port), TargetHandler)
    if certfile and keyfile:
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
        context.load_cert_chain(certfile, keyfile)
        server.socket = context.wrap_socket(server.socket, server_side=True)
    return server


def main(argv=None):
    parser = argparse.ArgumentParser(description="livetest target server")
    parser.add_argument('--host', default='127.0.0.1')
    parser.add_argument('--port', type=int, required=True)
    parser.add_argument('--cert', default=None, help="PEM certificate; enables HTTPS with --key")
    parser.add_argument('--key', default=None, help="PEM private key")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )

    server = make_server(args.port, args.host, args.cert, args.key)
    scheme = 'https' if args.cert and args.key else 'http'
    logger.info(f"Target server listening on {scheme}://{args.host}:{args.port}")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
    return 0


if __name__ == '__main__':
    sys.exit(main())
